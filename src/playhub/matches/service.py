"""Paid match-request postings ("looking for a squad")."""

from __future__ import annotations

import math
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, or_, select

from playhub.clock import utcnow
from playhub.config import get_settings
from playhub.credits.ledger import deduct_credits
from playhub.db.models import MatchRequest, User
from playhub.errors import Forbidden, NotFound

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def create_match_request(
    db: AsyncSession,
    user: User,
    *,
    game: str,
    mode: str,
    platform: str,
    language: str,
    description: str | None = None,
    now: datetime | None = None,
) -> tuple[MatchRequest, int]:
    """
    Charge the posting cost and store the request.

    Returns:
        (request, new_balance)

    Raises:
        InsufficientFunds: balance below the posting cost; nothing is stored.
    """
    if now is None:
        now = utcnow()
    cost = get_settings().match_posting_cost
    new_balance = await deduct_credits(db, user.id, cost, "match_posting", now=now)

    request = MatchRequest(
        user_id=user.id,
        user=user,
        game=game.strip(),
        mode=mode.strip(),
        platform=platform.strip(),
        language=language.strip(),
        description=description,
        status="open",
        created_at=now,
    )
    db.add(request)
    await db.flush()
    logger.info("match_request_created", request_id=request.id, user_id=user.id, cost=cost, balance=new_balance)
    return request, new_balance


async def list_match_requests(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 20,
    game: str | None = None,
    mode: str | None = None,
    platform: str | None = None,
    search: str | None = None,
) -> tuple[list[MatchRequest], int, int]:
    """Filtered, newest-first page. Returns (items, total, total_pages)."""
    conditions = []
    if game:
        conditions.append(MatchRequest.game.ilike(f"%{game}%"))
    if mode:
        conditions.append(MatchRequest.mode == mode)
    if platform:
        conditions.append(MatchRequest.platform == platform)
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(MatchRequest.game.ilike(pattern), MatchRequest.description.ilike(pattern)))

    total = await db.scalar(select(func.count()).select_from(MatchRequest).where(*conditions)) or 0

    result = await db.execute(
        select(MatchRequest)
        .where(*conditions)
        .order_by(MatchRequest.created_at.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    )
    items = list(result.scalars().unique().all())
    return items, total, math.ceil(total / limit) if total else 0


async def delete_match_request(db: AsyncSession, request_id: str, user_id: int) -> None:
    request = await db.get(MatchRequest, request_id)
    if request is None:
        msg = "Match request not found"
        raise NotFound(msg)
    if request.user_id != user_id:
        msg = "You can only delete your own match requests"
        raise Forbidden(msg)
    await db.delete(request)
    await db.flush()
    logger.info("match_request_deleted", request_id=request_id, user_id=user_id)
