"""Request/response schemas for tournament endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from playhub.schemas import ApiModel, RequestModel

TournamentStatus = Literal["upcoming", "active", "completed"]


class TournamentCreateRequest(RequestModel):
    name: str = Field(..., min_length=1, max_length=128)
    game_name: str = Field(..., min_length=1, max_length=128)
    prize_pool: int = Field(0, ge=0)
    entry_fee: int = Field(0, ge=0)
    max_participants: int = Field(..., ge=2, le=1024)
    players_per_team: int = Field(1, ge=1, le=16)
    start_time: datetime | None = None


class TournamentUpdateRequest(RequestModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    game_name: str | None = Field(None, min_length=1, max_length=128)
    prize_pool: int | None = Field(None, ge=0)
    entry_fee: int | None = Field(None, ge=0)
    max_participants: int | None = Field(None, ge=2, le=1024)
    players_per_team: int | None = Field(None, ge=1, le=16)
    start_time: datetime | None = None
    status: TournamentStatus | None = None


class TournamentResponse(ApiModel):
    id: str
    name: str
    game_name: str
    prize_pool: int
    entry_fee: int
    max_participants: int
    players_per_team: int
    start_time: datetime | None = None
    status: str
    created_by: int
    created_at: datetime
    participant_count: int = 0


class JoinRequest(RequestModel):
    in_game_name: str = Field(..., min_length=1, max_length=64)
    in_game_id: str = Field(..., min_length=1, max_length=64)
    teammate_ids: list[int] = Field(default_factory=list, max_length=15)


class ParticipantUser(ApiModel):
    id: int
    gamertag: str
    profile_image_url: str | None = None
    level: int


class ParticipantResponse(ApiModel):
    id: str
    tournament_id: str
    user_id: int
    game_details: dict[str, Any] | None = None
    teammate_ids: list[int] = []
    status: str
    created_at: datetime
    user: ParticipantUser | None = None


class JoinResponse(ApiModel):
    success: bool = True
    participant: ParticipantResponse
    balance: int


class MessageCreateRequest(RequestModel):
    message: str = Field(..., min_length=1, max_length=2000)
    is_announcement: bool = False


class TournamentMessageResponse(ApiModel):
    id: str
    tournament_id: str
    sender_id: int
    sender_gamertag: str | None = None
    message: str
    is_announcement: bool
    created_at: datetime
