"""
Account creation and gamertag + password login.

Third-party identity providers (Google, Firebase phone auth) are handled
outside this service; they end up calling ``get_or_create_user`` with a
provisioned gamertag.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from playhub.auth.password import hash_password, validate_password_strength, verify_password
from playhub.config import get_settings
from playhub.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_GAMERTAG_RE = re.compile(r"^[a-z0-9_]+$")


def normalize_gamertag(gamertag: str) -> str:
    """Lowercase and validate a gamertag.

    Raises:
        ValueError: If the gamertag is too short or has invalid characters.
    """
    normalized = gamertag.strip().lower()
    min_length = get_settings().gamertag_min_length
    if len(normalized) < min_length:
        msg = f"Gamertag must be at least {min_length} characters"
        raise ValueError(msg)
    if not _GAMERTAG_RE.match(normalized):
        msg = "Gamertag may only contain letters, digits and underscores"
        raise ValueError(msg)
    return normalized


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_gamertag(db: AsyncSession, gamertag: str) -> User | None:
    result = await db.execute(select(User).where(User.gamertag == gamertag.lower()))
    return result.scalar_one_or_none()


def _apply_admin_flag(user: User) -> None:
    if user.gamertag in {g.lower() for g in get_settings().admin_gamertags}:
        user.is_admin = True


async def get_or_create_user(db: AsyncSession, gamertag: str) -> tuple[User, bool]:
    """Fetch a user by gamertag, creating a password-less account if needed."""
    normalized = normalize_gamertag(gamertag)
    user = await get_user_by_gamertag(db, normalized)
    if user is not None:
        return user, False

    user = User(
        gamertag=normalized,
        coins=get_settings().starting_coins,
        game_profiles={},
        created_at=datetime.now(timezone.utc),
        last_connection_request_reset=datetime.now(timezone.utc),
    )
    _apply_admin_flag(user)
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, gamertag=normalized)
    return user, True


async def register_user(
    db: AsyncSession,
    gamertag: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """
    Register a new account with the configured starting balance.

    Raises:
        PasswordStrengthError: If the password is too weak.
        ValueError: If the gamertag is invalid or already taken.
    """
    validate_password_strength(password)
    normalized = normalize_gamertag(gamertag)

    if await get_user_by_gamertag(db, normalized) is not None:
        msg = "Gamertag already taken"
        raise ValueError(msg)

    now = datetime.now(timezone.utc)
    user = User(
        gamertag=normalized,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        coins=get_settings().starting_coins,
        game_profiles={},
        created_at=now,
        last_login=now,
        last_connection_request_reset=now,
    )
    _apply_admin_flag(user)
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, gamertag=normalized, method="password")
    return user


async def authenticate_user(db: AsyncSession, gamertag: str, password: str) -> User:
    """
    Check gamertag + password.

    Raises:
        ValueError: If credentials are invalid.
        PermissionError: If the account is banned.
    """
    user = await get_user_by_gamertag(db, gamertag.strip())
    if user is None or not verify_password(password, user.password_hash or ""):
        msg = "Invalid gamertag or password"
        raise ValueError(msg)
    if user.is_banned:
        msg = "Account is banned"
        raise PermissionError(msg)

    _apply_admin_flag(user)
    user.last_login = datetime.now(timezone.utc)
    await db.flush()
    return user
