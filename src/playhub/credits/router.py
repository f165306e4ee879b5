"""Credits router: balance, direct spending, history and admin grants."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.dependencies import get_current_admin, get_current_user
from playhub.credits.ledger import credit_reward, deduct_credits, get_balance, list_transactions
from playhub.credits.schemas import (
    AdminGrantRequest,
    BalanceResponse,
    DeductRequest,
    DeductResponse,
    TransactionResponse,
)
from playhub.database import get_session
from playhub.db.models import User

router = APIRouter(prefix="/api", tags=["Credits"])


@router.get("/user/credits", response_model=BalanceResponse)
async def get_credits(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BalanceResponse:
    """Current coin balance."""
    return BalanceResponse(balance=await get_balance(db, user.id))


@router.post("/credits/deduct", response_model=DeductResponse)
async def deduct(
    body: DeductRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> DeductResponse:
    """Spend coins. 400 with "Insufficient credits" when the balance is too low."""
    balance = await deduct_credits(db, user.id, body.amount, body.type)
    await db.commit()
    return DeductResponse(balance=balance)


@router.get("/credits/transactions", response_model=list[TransactionResponse])
async def transactions(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[TransactionResponse]:
    """Newest-first transaction history."""
    rows = await list_transactions(db, user.id, limit=limit, offset=offset)
    return [TransactionResponse.model_validate(r) for r in rows]


@router.post("/admin/credits/grant", response_model=BalanceResponse)
async def admin_grant(
    body: AdminGrantRequest,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> BalanceResponse:
    """Credit coins to any user (admin only)."""
    balance = await credit_reward(db, body.user_id, body.amount, body.type)
    await db.commit()
    return BalanceResponse(balance=balance)
