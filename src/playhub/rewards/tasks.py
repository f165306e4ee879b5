"""Earnable one-off tasks: definitions, per-user progress and completion."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from playhub.clock import utcnow
from playhub.credits.ledger import credit_reward
from playhub.db.models import Task, UserTask
from playhub.errors import NotFound
from playhub.rewards.service import grant_xp

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_tasks(db: AsyncSession, task_type: str | None = None) -> list[Task]:
    stmt = select(Task).order_by(Task.sort_order, Task.id)
    if task_type:
        stmt = stmt.where(Task.type == task_type)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_user_tasks(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """All tasks annotated with the user's completion state."""
    tasks = await list_tasks(db)
    result = await db.execute(select(UserTask).where(UserTask.user_id == user_id))
    done = {ut.task_id: ut for ut in result.scalars()}

    rows = []
    for task in tasks:
        user_task = done.get(task.id)
        rows.append({
            "task_id": task.id,
            "title": task.title,
            "description": task.description,
            "type": task.type,
            "reward_coins": task.reward_coins,
            "reward_xp": task.reward_xp,
            "status": "completed" if user_task else "pending",
            "completed_at": user_task.completed_at if user_task else None,
        })
    return rows


async def complete_task(
    db: AsyncSession,
    user_id: int,
    task_id: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Mark a task complete and pay out its coins and XP, once per user.

    Raises:
        NotFound: Unknown task id.
    """
    task = await db.get(Task, task_id)
    if task is None:
        msg = "Task not found"
        raise NotFound(msg)

    existing = await db.execute(
        select(UserTask).where(UserTask.user_id == user_id, UserTask.task_id == task_id)
    )
    if existing.scalar_one_or_none() is not None:
        return {"success": False, "message": "Task already completed"}

    if now is None:
        now = utcnow()
    db.add(UserTask(user_id=user_id, task_id=task_id, status="completed", completed_at=now))
    try:
        await db.flush()
    except IntegrityError:
        # A concurrent submit recorded the completion first; nothing was paid here
        await db.rollback()
        logger.info("task_completion_duplicate", user_id=user_id, task_id=task_id)
        return {"success": False, "message": "Task already completed"}

    if task.reward_coins > 0:
        await credit_reward(db, user_id, task.reward_coins, "task_reward", now=now)
    if task.reward_xp > 0:
        await grant_xp(db, user_id, task.reward_xp)

    logger.info("task_completed", user_id=user_id, task_id=task_id)
    return {
        "success": True,
        "message": f"Task completed! Gained {task.reward_coins} coins and {task.reward_xp} XP!",
    }
