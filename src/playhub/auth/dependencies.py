"""FastAPI authentication dependencies.

The resolved ``User`` is handed to routers explicitly; services receive the
user id (or the user) as an argument and never look identity up globally.
"""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.jwt import verify_token
from playhub.auth.service import get_user_by_id
from playhub.database import get_session
from playhub.db.models import User

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Extract and verify the bearer JWT, return the User. Raises 401/403."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    user = await get_user_by_id(db, int(payload["sub"]))
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    if user.is_banned:
        raise HTTPException(status_code=403, detail="Account is banned")
    return user


async def get_current_admin(
    user: User = Depends(get_current_user),
) -> User:
    """Same as get_current_user but requires the admin flag."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
