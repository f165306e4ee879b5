"""Request/response schemas for match requests."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from playhub.schemas import ApiModel, RequestModel


class MatchRequestCreate(RequestModel):
    game: str = Field(..., min_length=1, max_length=128)
    mode: str = Field(..., min_length=1, max_length=64)
    platform: str = Field(..., min_length=1, max_length=64)
    language: str = Field(..., min_length=1, max_length=32)
    description: str | None = Field(None, max_length=1000)


class MatchRequestAuthor(ApiModel):
    id: int
    gamertag: str
    profile_image_url: str | None = None
    level: int


class MatchRequestResponse(ApiModel):
    id: str
    user_id: int
    game: str
    mode: str
    platform: str
    language: str
    description: str | None = None
    status: str
    created_at: datetime
    user: MatchRequestAuthor | None = None


class MatchRequestCreated(MatchRequestResponse):
    new_balance: int


class MatchRequestPage(ApiModel):
    requests: list[MatchRequestResponse]
    total: int
    page: int
    limit: int
    total_pages: int
