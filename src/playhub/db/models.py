"""ORM models for the economy, subscription and tournament tables.

Portable across PostgreSQL (production, via asyncpg) and SQLite (tests):
JSONB and BIGINT are applied as PostgreSQL variants only.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from playhub.db.base import Base

# SQLite only autoincrements INTEGER PRIMARY KEY columns
BigIntId = BigInteger().with_variant(Integer, "sqlite")
JsonType = JSON().with_variant(JSONB, "postgresql")


def _uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

SUBSCRIPTION_TIERS = ("free", "pro", "gold")

TRANSACTION_TYPES = (
    "match_posting",
    "connection_request",
    "portfolio_boost",
    "voice_channel_purchase",
    "subscription_charge",
    "rewarded_ad",
    "admin_credit",
    "refund",
    "daily_reward",
    "tournament_entry",
    "task_reward",
)

TOURNAMENT_STATUSES = ("upcoming", "active", "completed")
PARTICIPANT_STATUSES = ("registered", "pending", "rejected")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Player account with its coin balance and subscription bookkeeping."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("coins >= 0", name="users_coins_non_negative"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    gamertag: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(256), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    is_banned: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())

    # --- Economy ---
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=100, server_default="100")
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    daily_reward_last_claimed: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_ad_reward_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # --- Subscription ---
    subscription_tier: Mapped[str] = mapped_column(String(8), nullable=False, default="free", server_default="free")
    subscription_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    connection_requests_used_today: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    last_connection_request_reset: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now()
    )

    game_profiles: Mapped[dict[str, Any]] = mapped_column(JsonType, nullable=False, default=dict)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CreditTransaction(Base):
    """Append-only audit row written alongside every balance change."""

    __tablename__ = "credit_transactions"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------


class Tournament(Base):
    __tablename__ = "tournaments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    game_name: Mapped[str] = mapped_column(String(128), nullable=False)
    prize_pool: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    entry_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False)
    players_per_team: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="upcoming", server_default="upcoming")
    created_by: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class TournamentParticipant(Base):
    __tablename__ = "tournament_participants"
    __table_args__ = (
        UniqueConstraint("tournament_id", "user_id", name="tournament_participants_tournament_user_key"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tournament_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    game_details: Mapped[dict[str, Any] | None] = mapped_column(JsonType, nullable=True)
    teammate_ids: Mapped[list[int]] = mapped_column(JsonType, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="registered", server_default="registered")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship("User", lazy="joined")


class TournamentMessage(Base):
    __tablename__ = "tournament_messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tournament_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id"), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_announcement: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    sender: Mapped[User] = relationship("User", lazy="joined")


# ---------------------------------------------------------------------------
# Match requests
# ---------------------------------------------------------------------------


class MatchRequest(Base):
    """Paid "looking for group" post."""

    __tablename__ = "match_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    game: Mapped[str] = mapped_column(String(128), nullable=False)
    mode: Mapped[str] = mapped_column(String(64), nullable=False)
    platform: Mapped[str] = mapped_column(String(64), nullable=False)
    language: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="open", server_default="open")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship("User", lazy="joined")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class Task(Base):
    """One-off earnable task definitions, seeded on startup."""

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    reward_coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reward_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")


class UserTask(Base):
    __tablename__ = "user_tasks"
    __table_args__ = (UniqueConstraint("user_id", "task_id", name="user_tasks_user_task_key"),)

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    task_id: Mapped[str] = mapped_column(String(64), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="completed")
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
