"""Coin ledger: the only code path that changes ``users.coins``.

Every mutation is a single conditional UPDATE ... RETURNING, so concurrent
requests for the same user serialize on the row lock and a deduction can never
take the balance below zero. Each change appends a ``CreditTransaction`` in the
same database transaction; the caller owns the commit.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update

from playhub.clock import utcnow
from playhub.db.models import TRANSACTION_TYPES, CreditTransaction, User
from playhub.errors import InsufficientFunds, NotFound, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def _check_type(tx_type: str) -> None:
    if tx_type not in TRANSACTION_TYPES:
        msg = f"Unknown transaction type: {tx_type}"
        raise ValidationError(msg)


async def _require_user(db: AsyncSession, user_id: int) -> None:
    exists = await db.scalar(select(User.id).where(User.id == user_id))
    if exists is None:
        msg = "User not found"
        raise NotFound(msg)


async def get_balance(db: AsyncSession, user_id: int) -> int:
    """Return the stored coin balance for a user."""
    coins = await db.scalar(select(User.coins).where(User.id == user_id))
    if coins is None:
        msg = "User not found"
        raise NotFound(msg)
    return coins


async def deduct_credits(
    db: AsyncSession,
    user_id: int,
    amount: int,
    tx_type: str,
    now: datetime | None = None,
) -> int:
    """
    Atomically remove ``amount`` coins and record a negative transaction.

    Returns:
        The new balance.

    Raises:
        ValidationError: amount is not positive or the type is unknown.
        InsufficientFunds: balance is lower than amount. Nothing is written.
        NotFound: the user does not exist.
    """
    if amount <= 0:
        msg = "Invalid amount"
        raise ValidationError(msg)
    _check_type(tx_type)

    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.coins >= amount)
        .values(coins=User.coins - amount)
        .returning(User.coins)
        .execution_options(synchronize_session="fetch")
    )
    new_balance = result.scalar_one_or_none()
    if new_balance is None:
        await _require_user(db, user_id)
        logger.info("credits_deduct_refused", user_id=user_id, amount=amount, type=tx_type)
        raise InsufficientFunds

    db.add(CreditTransaction(
        user_id=user_id,
        amount=-amount,
        type=tx_type,
        created_at=now or utcnow(),
    ))
    await db.flush()

    logger.info("credits_deducted", user_id=user_id, amount=amount, type=tx_type, balance=new_balance)
    return new_balance


async def credit_reward(
    db: AsyncSession,
    user_id: int,
    amount: int,
    tx_type: str,
    now: datetime | None = None,
) -> int:
    """Atomically add ``amount`` coins and record a positive transaction. Returns the new balance."""
    if amount <= 0:
        msg = "Invalid amount"
        raise ValidationError(msg)
    _check_type(tx_type)

    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(coins=User.coins + amount)
        .returning(User.coins)
        .execution_options(synchronize_session="fetch")
    )
    new_balance = result.scalar_one_or_none()
    if new_balance is None:
        msg = "User not found"
        raise NotFound(msg)

    db.add(CreditTransaction(
        user_id=user_id,
        amount=amount,
        type=tx_type,
        created_at=now or utcnow(),
    ))
    await db.flush()

    logger.info("credits_credited", user_id=user_id, amount=amount, type=tx_type, balance=new_balance)
    return new_balance


async def list_transactions(
    db: AsyncSession,
    user_id: int,
    limit: int = 50,
    offset: int = 0,
) -> list[CreditTransaction]:
    """Newest-first page of a user's transaction history."""
    result = await db.execute(
        select(CreditTransaction)
        .where(CreditTransaction.user_id == user_id)
        .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())
