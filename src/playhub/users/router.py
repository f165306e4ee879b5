"""User game-profile router."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.dependencies import get_current_user
from playhub.database import get_session
from playhub.db.models import User
from playhub.schemas import RequestModel
from playhub.users.service import get_game_profiles, set_game_profile

router = APIRouter(prefix="/api/user", tags=["Users"])


class GameProfileRequest(RequestModel):
    in_game_name: str = Field(..., min_length=1, max_length=64)
    in_game_id: str = Field(..., min_length=1, max_length=64)


@router.get("/game-profiles")
async def list_game_profiles(user: User = Depends(get_current_user)) -> dict[str, Any]:
    """Map of game name to {inGameName, inGameId}."""
    return get_game_profiles(user)


@router.put("/game-profiles/{game}")
async def put_game_profile(
    game: str,
    body: GameProfileRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    profiles = await set_game_profile(db, user, game, body.in_game_name, body.in_game_id)
    await db.commit()
    return profiles
