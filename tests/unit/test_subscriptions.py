"""Subscription purchase and the lazily reset connection-request quota."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.service import get_or_create_user
from playhub.clock import ensure_utc
from playhub.credits.ledger import list_transactions
from playhub.database import get_engine
from playhub.db.models import User
from playhub.errors import InsufficientFunds, InvalidTier, QuotaExceeded
from playhub.subscriptions.service import (
    effective_tier,
    get_subscription_status,
    purchase_subscription,
    use_connection_request,
)

T0 = datetime(2026, 5, 10, 9, 30, tzinfo=timezone.utc)


async def _user(db: AsyncSession, coins: int = 100, **fields) -> int:
    user, _ = await get_or_create_user(db, "sub_user")
    user.coins = coins
    user.last_connection_request_reset = T0
    for name, value in fields.items():
        setattr(user, name, value)
    await db.commit()
    return user.id


class TestPurchase:
    @pytest.mark.asyncio
    async def test_gold_purchase_spends_everything(self, db_session):
        uid = await _user(db_session, coins=300, connection_requests_used_today=2)
        user = await purchase_subscription(db_session, uid, "gold", now=T0)
        await db_session.commit()

        assert user.coins == 0
        assert user.subscription_tier == "gold"
        assert ensure_utc(user.subscription_end_date) == T0 + timedelta(hours=48)
        assert user.connection_requests_used_today == 0

        rows = await list_transactions(db_session, uid)
        assert [(r.amount, r.type) for r in rows] == [(-300, "subscription_charge")]

    @pytest.mark.asyncio
    async def test_pro_costs_150(self, db_session):
        uid = await _user(db_session, coins=200)
        user = await purchase_subscription(db_session, uid, "pro", now=T0)
        assert user.coins == 50

    @pytest.mark.asyncio
    async def test_insufficient_balance_changes_nothing(self, db_session):
        uid = await _user(db_session, coins=299)
        with pytest.raises(InsufficientFunds):
            await purchase_subscription(db_session, uid, "gold", now=T0)
        await db_session.rollback()

        user = await db_session.get(User, uid)
        assert user.coins == 299
        assert user.subscription_tier == "free"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tier", ["free", "platinum", ""])
    async def test_invalid_tier(self, db_session, tier):
        uid = await _user(db_session, coins=1000)
        with pytest.raises(InvalidTier, match="Invalid subscription tier"):
            await purchase_subscription(db_session, uid, tier, now=T0)


class TestEffectiveTier:
    def test_expired_subscription_is_free(self):
        user = User(subscription_tier="gold", subscription_end_date=T0 - timedelta(seconds=1))
        assert effective_tier(user, T0) == ("free", False)

    def test_active_subscription(self):
        user = User(subscription_tier="pro", subscription_end_date=T0 + timedelta(hours=1))
        assert effective_tier(user, T0) == ("pro", True)


class TestConnectionQuota:
    @pytest.mark.asyncio
    async def test_free_user_limit_three(self, db_session):
        uid = await _user(db_session)
        for expected_remaining in (2, 1, 0):
            status = await use_connection_request(db_session, uid, now=T0 + timedelta(minutes=1))
            assert status["requests_remaining"] == expected_remaining

        with pytest.raises(QuotaExceeded):
            await use_connection_request(db_session, uid, now=T0 + timedelta(minutes=2))

    @pytest.mark.asyncio
    async def test_stale_reader_cannot_exceed_quota(self, database):
        """A session that read the counter before another request used the last slot is refused."""
        later = T0 + timedelta(minutes=1)
        async with AsyncSession(get_engine(), expire_on_commit=False) as setup:
            uid = await _user(setup, connection_requests_used_today=2)

        async with AsyncSession(get_engine(), expire_on_commit=False) as stale:
            status = await get_subscription_status(stale, uid, now=later)
            assert status["requests_remaining"] == 1

            async with AsyncSession(get_engine()) as other:
                await use_connection_request(other, uid, now=later)
                await other.commit()

            with pytest.raises(QuotaExceeded):
                await use_connection_request(stale, uid, now=later)
            await stale.rollback()

        async with AsyncSession(get_engine()) as check:
            user = await check.get(User, uid)
            assert user.connection_requests_used_today == 3

    @pytest.mark.asyncio
    async def test_status_resets_after_window(self, db_session):
        """3/3 used and last reset 25h ago: status shows a fresh quota."""
        uid = await _user(db_session, connection_requests_used_today=3)
        now = T0 + timedelta(hours=25)

        status = await get_subscription_status(db_session, uid, now=now)
        assert status == {
            "tier": "free",
            "is_active": False,
            "daily_limit": 3,
            "requests_used_today": 0,
            "requests_remaining": 3,
        }
        user = await db_session.get(User, uid)
        assert ensure_utc(user.last_connection_request_reset) == now

    @pytest.mark.asyncio
    async def test_status_within_window_keeps_usage(self, db_session):
        uid = await _user(db_session, connection_requests_used_today=3)
        status = await get_subscription_status(db_session, uid, now=T0 + timedelta(hours=23))
        assert status["requests_remaining"] == 0

    @pytest.mark.asyncio
    async def test_gold_limit_thirty(self, db_session):
        uid = await _user(db_session, coins=300)
        await purchase_subscription(db_session, uid, "gold", now=T0)
        status = await get_subscription_status(db_session, uid, now=T0 + timedelta(hours=1))
        assert status["tier"] == "gold"
        assert status["daily_limit"] == 30
        assert status["requests_remaining"] == 30
