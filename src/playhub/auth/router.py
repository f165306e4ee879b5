"""Authentication router: /api/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.dependencies import get_current_user
from playhub.auth.jwt import create_access_token
from playhub.auth.password import PasswordStrengthError
from playhub.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from playhub.auth.service import authenticate_user, register_user
from playhub.config import get_settings
from playhub.database import get_session
from playhub.db.models import User

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _token_response(user: User) -> TokenResponse:
    settings = get_settings()
    return TokenResponse(
        token=create_access_token(user.id, user.gamertag),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Create an account with the starting coin balance and return a token."""
    try:
        user = await register_user(
            db,
            gamertag=body.gamertag,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
        )
    except PasswordStrengthError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ValueError as e:
        detail = str(e)
        if "already taken" in detail.lower():
            raise HTTPException(status_code=409, detail=detail) from e
        raise HTTPException(status_code=400, detail=detail) from e

    await db.commit()
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Gamertag + password login."""
    try:
        user = await authenticate_user(db, body.gamertag, body.password)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    await db.commit()
    logger.info("user_logged_in", user_id=user.id)
    return _token_response(user)


@router.get("/user", response_model=UserResponse)
async def current_user(
    user: User = Depends(get_current_user),
) -> UserResponse:
    """Return the authenticated user's full profile."""
    return UserResponse.model_validate(user)
