"""Subscription router: tier purchase, status and quota consumption."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.dependencies import get_current_user
from playhub.auth.schemas import UserResponse
from playhub.database import get_session
from playhub.db.models import User
from playhub.subscriptions.schemas import PurchaseResponse, SubscriptionStatusResponse
from playhub.subscriptions.service import (
    get_subscription_status,
    purchase_subscription,
    use_connection_request,
)

router = APIRouter(prefix="/api", tags=["Subscriptions"])


@router.post("/subscription/purchase/{tier}", response_model=PurchaseResponse)
async def purchase(
    tier: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> PurchaseResponse:
    """Buy the pro or gold tier with coins."""
    updated = await purchase_subscription(db, user.id, tier)
    await db.commit()
    return PurchaseResponse(success=True, user=UserResponse.model_validate(updated))


@router.get("/subscription/status", response_model=SubscriptionStatusResponse)
async def status(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SubscriptionStatusResponse:
    """Effective tier and today's connection-request quota."""
    result = await get_subscription_status(db, user.id)
    await db.commit()
    return SubscriptionStatusResponse(**result)


@router.post("/connection-requests", response_model=SubscriptionStatusResponse)
async def send_connection_request(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SubscriptionStatusResponse:
    """Consume one connection request. 429 once the daily quota is used up."""
    result = await use_connection_request(db, user.id)
    await db.commit()
    return SubscriptionStatusResponse(**result)
