"""Access token round trip and rejection cases."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from playhub.auth.jwt import create_access_token, verify_token
from playhub.config import get_settings


def test_token_carries_subject_and_gamertag():
    payload = verify_token(create_access_token(42, "sniper"))
    assert payload["sub"] == "42"
    assert payload["gamertag"] == "sniper"
    assert payload["iss"] == "playhub"


def test_wrong_type_rejected():
    settings = get_settings()
    token = jwt.encode(
        {"sub": "1", "type": "refresh", "iss": settings.jwt_issuer, "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        settings.jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
        verify_token(token)


def test_expired_token_rejected():
    settings = get_settings()
    token = jwt.encode(
        {"sub": "1", "type": "access", "iss": settings.jwt_issuer, "exp": datetime.now(timezone.utc) - timedelta(seconds=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidTokenError, match="expired"):
        verify_token(token)


def test_foreign_signature_rejected():
    token = jwt.encode(
        {"sub": "1", "type": "access", "iss": "playhub"}, "some-other-secret-that-is-long-enough", algorithm="HS256"
    )
    with pytest.raises(jwt.InvalidTokenError):
        verify_token(token)
