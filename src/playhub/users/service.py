"""Per-game in-game identities stored on the user row."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from playhub.db.models import User

logger = structlog.get_logger()


def get_game_profiles(user: User) -> dict[str, Any]:
    return dict(user.game_profiles or {})


async def set_game_profile(
    db: AsyncSession,
    user: User,
    game: str,
    in_game_name: str,
    in_game_id: str,
) -> dict[str, Any]:
    """Create or replace the profile for ``game``. Returns all profiles."""
    profiles = get_game_profiles(user)
    profiles[game] = {"inGameName": in_game_name, "inGameId": in_game_id}
    # JSON columns only notice reassignment, not in-place mutation
    user.game_profiles = profiles
    await db.flush()
    logger.info("game_profile_saved", user_id=user.id, game=game)
    return profiles
