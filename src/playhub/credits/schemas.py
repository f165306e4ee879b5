"""Request/response schemas for the credits endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from playhub.schemas import ApiModel, RequestModel

# Kinds a client may spend coins on directly through /api/credits/deduct
SpendType = Literal["match_posting", "connection_request", "portfolio_boost", "voice_channel_purchase"]


class BalanceResponse(ApiModel):
    balance: int


class DeductRequest(RequestModel):
    amount: int = Field(..., gt=0)
    type: SpendType


class DeductResponse(ApiModel):
    success: bool = True
    balance: int


class TransactionResponse(ApiModel):
    id: int
    amount: int
    type: str
    created_at: datetime


class AdminGrantRequest(RequestModel):
    user_id: int
    amount: int = Field(..., gt=0)
    type: Literal["admin_credit", "refund"] = "admin_credit"
