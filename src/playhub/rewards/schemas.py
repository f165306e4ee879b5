"""Response schemas for reward endpoints."""

from __future__ import annotations

from datetime import datetime

from playhub.schemas import ApiModel


class DailyRewardResponse(ApiModel):
    success: bool
    coins: int
    message: str


class AdRewardResponse(ApiModel):
    success: bool = True
    balance: int
    message: str


class TaskResponse(ApiModel):
    id: str
    title: str
    description: str
    type: str
    reward_coins: int
    reward_xp: int


class UserTaskResponse(ApiModel):
    task_id: str
    title: str
    description: str
    type: str
    reward_coins: int
    reward_xp: int
    status: str
    completed_at: datetime | None = None


class TaskCompletionResponse(ApiModel):
    success: bool
    message: str
