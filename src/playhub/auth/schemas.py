"""Request/response schemas for authentication and the user profile."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from playhub.schemas import ApiModel, RequestModel


class RegisterRequest(RequestModel):
    gamertag: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)
    first_name: str | None = Field(None, max_length=64)
    last_name: str | None = Field(None, max_length=64)


class LoginRequest(RequestModel):
    gamertag: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(ApiModel):
    id: int
    gamertag: str
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    is_admin: bool = False
    coins: int
    xp: int
    level: int
    subscription_tier: str
    subscription_end_date: datetime | None = None
    connection_requests_used_today: int
    last_connection_request_reset: datetime | None = None
    daily_reward_last_claimed: datetime | None = None
    game_profiles: dict[str, Any] = {}
    created_at: datetime | None = None


class TokenResponse(ApiModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
