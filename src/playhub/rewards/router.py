"""Rewards router: daily claim, rewarded ads, tasks."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.dependencies import get_current_user
from playhub.database import get_session
from playhub.db.models import User
from playhub.rewards.schemas import (
    AdRewardResponse,
    DailyRewardResponse,
    TaskCompletionResponse,
    TaskResponse,
    UserTaskResponse,
)
from playhub.rewards.service import claim_daily_reward, reward_ad_credit
from playhub.rewards.tasks import complete_task, get_user_tasks, list_tasks

router = APIRouter(prefix="/api", tags=["Rewards"])


@router.post("/user/claim-reward", response_model=DailyRewardResponse)
async def claim_reward(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DailyRewardResponse:
    """Daily reward. A too-early claim is still a 200 with success=false."""
    result = await claim_daily_reward(db, user.id)
    if result["success"]:
        await db.commit()
    return DailyRewardResponse(**result)


@router.post("/credits/reward-ad", response_model=AdRewardResponse)
async def reward_ad(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AdRewardResponse:
    """Credit a watched rewarded ad. 429 while the cooldown is running."""
    result = await reward_ad_credit(db, user.id)
    await db.commit()
    return AdRewardResponse(**result)


@router.get("/tasks", response_model=list[TaskResponse])
async def tasks(
    type: str | None = Query(None),  # noqa: A002
    db: AsyncSession = Depends(get_session),
) -> list[TaskResponse]:
    return [TaskResponse.model_validate(t) for t in await list_tasks(db, type)]


@router.get("/user/tasks", response_model=list[UserTaskResponse])
async def user_tasks(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[UserTaskResponse]:
    return [UserTaskResponse(**row) for row in await get_user_tasks(db, user.id)]


@router.post("/tasks/{task_id}/complete", response_model=TaskCompletionResponse)
async def complete(
    task_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TaskCompletionResponse:
    result = await complete_task(db, user.id, task_id)
    if result["success"]:
        await db.commit()
    return TaskCompletionResponse(**result)
