"""Subscription tiers and the daily connection-request quota.

Tiers are bought with coins and last a fixed number of days. The quota
counter is reset lazily: any status check or quota use more than 24h after
the last reset zeroes it first. There is no background scheduler.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select, update

from playhub.clock import ensure_utc, utcnow
from playhub.config import get_settings
from playhub.credits.ledger import deduct_credits
from playhub.db.models import User
from playhub.errors import InvalidTier, NotFound, QuotaExceeded

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def _get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        msg = "User not found"
        raise NotFound(msg)
    return user


def effective_tier(user: User, now: datetime) -> tuple[str, bool]:
    """Return (tier, is_active). An expired subscription falls back to free."""
    end = ensure_utc(user.subscription_end_date)
    is_active = end is not None and end > now
    return (user.subscription_tier or "free") if is_active else "free", is_active


def _maybe_reset_usage(user: User, now: datetime) -> bool:
    """Zero the usage counter if the last reset is older than the reset window."""
    window = timedelta(hours=get_settings().connection_request_reset_hours)
    last_reset = ensure_utc(user.last_connection_request_reset) or now
    if last_reset < now - window:
        user.connection_requests_used_today = 0
        user.last_connection_request_reset = now
        return True
    return False


async def purchase_subscription(
    db: AsyncSession,
    user_id: int,
    tier: str,
    now: datetime | None = None,
) -> User:
    """
    Buy a paid tier with coins.

    The charge, the tier change and the quota reset are applied in the
    caller's transaction; an insufficient balance raises before anything is
    written.

    Raises:
        InvalidTier: tier is not one of the purchasable tiers.
        InsufficientFunds: balance is lower than the tier cost.
    """
    settings = get_settings()
    costs = settings.subscription_costs
    if tier not in costs:
        raise InvalidTier(tier)
    if now is None:
        now = utcnow()

    await deduct_credits(db, user_id, costs[tier], "subscription_charge", now=now)

    user = await _get_user(db, user_id)
    user.subscription_tier = tier
    user.subscription_end_date = now + timedelta(days=settings.subscription_duration_days)
    user.connection_requests_used_today = 0
    user.last_connection_request_reset = now
    await db.flush()

    logger.info("subscription_purchased", user_id=user_id, tier=tier, cost=costs[tier], balance=user.coins)
    return user


def _quota(tier: str, is_active: bool, used: int) -> dict[str, Any]:
    daily_limit = get_settings().connection_request_limits[tier]
    return {
        "tier": tier,
        "is_active": is_active,
        "daily_limit": daily_limit,
        "requests_used_today": used,
        "requests_remaining": max(0, daily_limit - used),
    }


def _status(user: User, now: datetime) -> dict[str, Any]:
    tier, is_active = effective_tier(user, now)
    return _quota(tier, is_active, user.connection_requests_used_today or 0)


async def get_subscription_status(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Current tier and quota. May reset the usage counter as a side effect."""
    if now is None:
        now = utcnow()
    user = await _get_user(db, user_id)
    if _maybe_reset_usage(user, now):
        await db.flush()
        logger.info("connection_quota_reset", user_id=user_id)
    return _status(user, now)


async def use_connection_request(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Consume one connection request from today's quota.

    The counter is bumped by a single conditional UPDATE, so concurrent
    callers cannot push it past the tier's daily limit.

    Raises:
        QuotaExceeded: No requests remain for the current tier today.
    """
    if now is None:
        now = utcnow()
    user = await _get_user(db, user_id)
    if _maybe_reset_usage(user, now):
        await db.flush()
        logger.info("connection_quota_reset", user_id=user_id)

    tier, is_active = effective_tier(user, now)
    daily_limit = get_settings().connection_request_limits[tier]

    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.connection_requests_used_today < daily_limit)
        .values(connection_requests_used_today=User.connection_requests_used_today + 1)
        .returning(User.connection_requests_used_today)
        .execution_options(synchronize_session="fetch")
    )
    used = result.scalar_one_or_none()
    if used is None:
        logger.info("connection_quota_exhausted", user_id=user_id, tier=tier, limit=daily_limit)
        msg = f"Daily connection request limit reached ({daily_limit})"
        raise QuotaExceeded(msg)

    return _quota(tier, is_active, used)
