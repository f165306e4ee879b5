"""Daily claim and rewarded-ad boundaries, driven by an injected clock."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.service import get_or_create_user
from playhub.credits.ledger import get_balance, list_transactions
from playhub.db.models import User
from playhub.errors import CooldownActive
from playhub.rewards.service import TOO_EARLY_MESSAGE, claim_daily_reward, grant_xp, reward_ad_credit

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


async def _user(db: AsyncSession, coins: int = 100) -> int:
    user, _ = await get_or_create_user(db, "reward_user")
    user.coins = coins
    await db.commit()
    return user.id


class TestDailyReward:
    @pytest.mark.asyncio
    async def test_first_claim_credits_coins_and_xp(self, db_session):
        uid = await _user(db_session)
        result = await claim_daily_reward(db_session, uid, now=T0)
        await db_session.commit()

        assert result["success"] is True
        assert result["coins"] == 150
        assert result["message"] == "Claimed 50 coins and 50 XP!"
        user = await db_session.get(User, uid)
        assert user.xp == 50

    @pytest.mark.asyncio
    async def test_second_claim_within_24h_refused(self, db_session):
        uid = await _user(db_session)
        await claim_daily_reward(db_session, uid, now=T0)
        await db_session.commit()

        result = await claim_daily_reward(db_session, uid, now=T0 + timedelta(hours=23, minutes=59))
        assert result == {"success": False, "coins": 150, "message": TOO_EARLY_MESSAGE}

    @pytest.mark.asyncio
    async def test_claim_just_after_24h_credits_exactly_50(self, db_session):
        uid = await _user(db_session)
        await claim_daily_reward(db_session, uid, now=T0)
        await db_session.commit()

        result = await claim_daily_reward(db_session, uid, now=T0 + timedelta(hours=24, milliseconds=1))
        await db_session.commit()

        assert result["success"] is True
        assert await get_balance(db_session, uid) == 200

    @pytest.mark.asyncio
    async def test_exact_24h_boundary_is_eligible(self, db_session):
        uid = await _user(db_session)
        await claim_daily_reward(db_session, uid, now=T0)
        await db_session.commit()

        result = await claim_daily_reward(db_session, uid, now=T0 + timedelta(hours=24))
        assert result["success"] is True

    @pytest.mark.asyncio
    async def test_refused_claim_writes_no_transaction(self, db_session):
        uid = await _user(db_session)
        await claim_daily_reward(db_session, uid, now=T0)
        await db_session.commit()
        await claim_daily_reward(db_session, uid, now=T0 + timedelta(hours=1))
        await db_session.commit()

        rows = await list_transactions(db_session, uid)
        assert [(r.amount, r.type) for r in rows] == [(50, "daily_reward")]


class TestAdReward:
    @pytest.mark.asyncio
    async def test_ad_reward_credits_five(self, db_session):
        uid = await _user(db_session)
        result = await reward_ad_credit(db_session, uid, now=T0)
        assert result["balance"] == 105
        assert result["success"] is True

    @pytest.mark.asyncio
    async def test_cooldown_blocks_and_reports_retry_after(self, db_session):
        uid = await _user(db_session)
        await reward_ad_credit(db_session, uid, now=T0)
        await db_session.commit()

        with pytest.raises(CooldownActive) as exc_info:
            await reward_ad_credit(db_session, uid, now=T0 + timedelta(seconds=10))
        assert exc_info.value.retry_after == 20
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_available_again_after_cooldown(self, db_session):
        uid = await _user(db_session)
        await reward_ad_credit(db_session, uid, now=T0)
        await db_session.commit()

        result = await reward_ad_credit(db_session, uid, now=T0 + timedelta(seconds=30))
        assert result["balance"] == 110


class TestGrantXp:
    @pytest.mark.asyncio
    async def test_level_follows_total_xp(self, db_session):
        uid = await _user(db_session)
        assert await grant_xp(db_session, uid, 99) == (99, 1)
        assert await grant_xp(db_session, uid, 1) == (100, 2)
        assert await grant_xp(db_session, uid, 300) == (400, 3)
