"""Match request router: paid posting, filtered listing, owner delete."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.dependencies import get_current_user
from playhub.database import get_session
from playhub.db.models import User
from playhub.matches.schemas import (
    MatchRequestCreate,
    MatchRequestCreated,
    MatchRequestPage,
    MatchRequestResponse,
)
from playhub.matches.service import create_match_request, delete_match_request, list_match_requests
from playhub.schemas import MessageResponse

router = APIRouter(prefix="/api/match-requests", tags=["Match Requests"])


@router.get("", response_model=MatchRequestPage)
async def list_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    game: str | None = Query(None),
    mode: str | None = Query(None),
    platform: str | None = Query(None),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
) -> MatchRequestPage:
    items, total, total_pages = await list_match_requests(
        db, page=page, limit=limit, game=game, mode=mode, platform=platform, search=search,
    )
    return MatchRequestPage(
        requests=[MatchRequestResponse.model_validate(r) for r in items],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
    )


@router.post("", response_model=MatchRequestCreated, status_code=status.HTTP_201_CREATED)
async def create_request(
    body: MatchRequestCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MatchRequestCreated:
    """Post a match request. Costs a flat fee; 400 "Insufficient credits" when short."""
    request, new_balance = await create_match_request(db, user, **body.model_dump())
    await db.commit()
    data = MatchRequestResponse.model_validate(request).model_dump()
    return MatchRequestCreated(**data, new_balance=new_balance)


@router.delete("/{request_id}", response_model=MessageResponse)
async def delete_request(
    request_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await delete_match_request(db, request_id, user.id)
    await db.commit()
    return MessageResponse(message="Match request deleted")
