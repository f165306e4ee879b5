"""Response schemas for subscription endpoints."""

from __future__ import annotations

from playhub.auth.schemas import UserResponse
from playhub.schemas import ApiModel


class PurchaseResponse(ApiModel):
    success: bool
    user: UserResponse


class SubscriptionStatusResponse(ApiModel):
    tier: str
    is_active: bool
    daily_limit: int
    requests_used_today: int
    requests_remaining: int
