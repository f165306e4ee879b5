"""Time-gated rewards: the daily claim and rewarded-ad credits.

Both gates are evaluated inside the UPDATE statement itself
(``WHERE last IS NULL OR last <= now - interval``), so two concurrent claims
cannot both pass the check.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import or_, select, update

from playhub.clock import ensure_utc, utcnow
from playhub.config import get_settings
from playhub.credits.ledger import credit_reward, get_balance
from playhub.db.models import User
from playhub.errors import CooldownActive
from playhub.rewards.levels import compute_level

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

TOO_EARLY_MESSAGE = "Too early!"


async def grant_xp(db: AsyncSession, user_id: int, amount: int) -> tuple[int, int]:
    """Add XP and recompute the level. Returns (total_xp, level)."""
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(xp=User.xp + amount)
        .returning(User.xp)
        .execution_options(synchronize_session="fetch")
    )
    total_xp = result.scalar_one()
    level = compute_level(total_xp)
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(level=level)
        .execution_options(synchronize_session="fetch")
    )
    return total_xp, level


async def claim_daily_reward(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Claim the daily coin + XP reward.

    Eligible when never claimed or when at least the configured interval
    (24h) has elapsed; the exact boundary counts as eligible. A refused claim
    is a normal outcome (``success`` False), not an error.
    """
    settings = get_settings()
    if now is None:
        now = utcnow()
    cutoff = now - timedelta(hours=settings.daily_reward_interval_hours)

    result = await db.execute(
        update(User)
        .where(
            User.id == user_id,
            or_(
                User.daily_reward_last_claimed.is_(None),
                User.daily_reward_last_claimed <= cutoff,
            ),
        )
        .values(daily_reward_last_claimed=now)
        .returning(User.id)
        .execution_options(synchronize_session="fetch")
    )
    if result.scalar_one_or_none() is None:
        balance = await get_balance(db, user_id)
        return {"success": False, "coins": balance, "message": TOO_EARLY_MESSAGE}

    coins = await credit_reward(db, user_id, settings.daily_reward_coins, "daily_reward", now=now)
    xp_gain = settings.daily_reward_xp
    total_xp, level = await grant_xp(db, user_id, xp_gain)

    logger.info("daily_reward_claimed", user_id=user_id, coins=coins, xp=total_xp, level=level)
    return {
        "success": True,
        "coins": coins,
        "message": f"Claimed {settings.daily_reward_coins} coins and {xp_gain} XP!",
    }


async def reward_ad_credit(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Credit the rewarded-ad coins, at most once per cooldown window.

    Raises:
        CooldownActive: The previous ad reward is too recent.
    """
    settings = get_settings()
    if now is None:
        now = utcnow()
    cooldown = timedelta(seconds=settings.ad_reward_cooldown_seconds)

    result = await db.execute(
        update(User)
        .where(
            User.id == user_id,
            or_(
                User.last_ad_reward_at.is_(None),
                User.last_ad_reward_at <= now - cooldown,
            ),
        )
        .values(last_ad_reward_at=now)
        .returning(User.id)
        .execution_options(synchronize_session="fetch")
    )
    if result.scalar_one_or_none() is None:
        await get_balance(db, user_id)  # NotFound for unknown users
        last = ensure_utc(await db.scalar(select(User.last_ad_reward_at).where(User.id == user_id)))
        remaining = cooldown - (now - last) if last else cooldown
        retry_after = max(1, math.ceil(remaining.total_seconds()))
        msg = f"Please wait {retry_after}s before watching another ad"
        raise CooldownActive(msg, retry_after=retry_after)

    balance = await credit_reward(db, user_id, settings.ad_reward_coins, "rewarded_ad", now=now)
    return {
        "success": True,
        "balance": balance,
        "message": f"Earned {settings.ad_reward_coins} credits!",
    }
