"""Gamertag normalisation, password rules and account creation."""

from __future__ import annotations

import pytest

from playhub.auth.password import PasswordStrengthError, hash_password, validate_password_strength, verify_password
from playhub.auth.service import authenticate_user, get_or_create_user, normalize_gamertag, register_user


class TestNormalizeGamertag:
    def test_lowercases_and_strips(self):
        assert normalize_gamertag("  Pro_Player1 ") == "pro_player1"

    @pytest.mark.parametrize("gamertag", ["ab", "has space", "dash-name", "émoji"])
    def test_rejects_invalid(self, gamertag):
        with pytest.raises(ValueError):
            normalize_gamertag(gamertag)


class TestPasswords:
    def test_hash_roundtrip(self):
        hashed = hash_password("hunter22")
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)

    @pytest.mark.parametrize("password", ["", "     ", "abc", "x" * 129])
    def test_weak_passwords(self, password):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength(password)


class TestAccounts:
    @pytest.mark.asyncio
    async def test_get_or_create_is_idempotent(self, db_session):
        first, created = await get_or_create_user(db_session, "Gamer_One")
        second, created_again = await get_or_create_user(db_session, "gamer_one")
        assert created is True
        assert created_again is False
        assert first.id == second.id
        assert first.coins == 100

    @pytest.mark.asyncio
    async def test_admin_flag_from_settings(self, db_session):
        admin, _ = await get_or_create_user(db_session, "admin_user")
        assert admin.is_admin is True

    @pytest.mark.asyncio
    async def test_register_then_authenticate(self, db_session):
        await register_user(db_session, "Fresh_One", "hunter22")
        await db_session.commit()

        user = await authenticate_user(db_session, "fresh_one", "hunter22")
        assert user.gamertag == "fresh_one"
        with pytest.raises(ValueError, match="Invalid gamertag or password"):
            await authenticate_user(db_session, "fresh_one", "nope-nope")

    @pytest.mark.asyncio
    async def test_duplicate_registration(self, db_session):
        await register_user(db_session, "fresh_one", "hunter22")
        with pytest.raises(ValueError, match="already taken"):
            await register_user(db_session, "FRESH_ONE", "hunter22")
