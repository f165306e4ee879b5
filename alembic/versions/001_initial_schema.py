"""Initial schema: users, credit ledger, tournaments, match requests, tasks.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("gamertag", sa.String(64), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(256), nullable=True),
        sa.Column("first_name", sa.String(64), nullable=True),
        sa.Column("last_name", sa.String(64), nullable=True),
        sa.Column("profile_image_url", sa.Text(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("is_banned", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("coins", sa.Integer(), server_default="100", nullable=False),
        sa.Column("xp", sa.Integer(), server_default="0", nullable=False),
        sa.Column("level", sa.Integer(), server_default="1", nullable=False),
        sa.Column("daily_reward_last_claimed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_ad_reward_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subscription_tier", sa.String(8), server_default="free", nullable=False),
        sa.Column("subscription_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("connection_requests_used_today", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_connection_request_reset", sa.DateTime(timezone=True), nullable=True),
        sa.Column("game_profiles", postgresql.JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
    )
    op.execute("ALTER TABLE users ADD CONSTRAINT users_coins_non_negative CHECK (coins >= 0)")
    op.execute(
        "ALTER TABLE users ADD CONSTRAINT ck_users_subscription_tier "
        "CHECK (subscription_tier IN ('free', 'pro', 'gold'))"
    )

    # --- credit_transactions ---
    op.create_table(
        "credit_transactions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_credit_transactions_user_id", "credit_transactions", ["user_id"])
    op.execute("ALTER TABLE credit_transactions ADD CONSTRAINT ck_credit_transactions_nonzero CHECK (amount != 0)")

    # --- tournaments ---
    op.create_table(
        "tournaments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("game_name", sa.String(128), nullable=False),
        sa.Column("prize_pool", sa.Integer(), server_default="0", nullable=False),
        sa.Column("entry_fee", sa.Integer(), server_default="0", nullable=False),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("players_per_team", sa.Integer(), server_default="1", nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(16), server_default="upcoming", nullable=False),
        sa.Column("created_by", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.execute(
        "ALTER TABLE tournaments ADD CONSTRAINT ck_tournaments_status "
        "CHECK (status IN ('upcoming', 'active', 'completed'))"
    )

    op.create_table(
        "tournament_participants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "tournament_id", sa.String(36), sa.ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game_details", postgresql.JSONB(), nullable=True),
        sa.Column("teammate_ids", postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("status", sa.String(16), server_default="registered", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("tournament_id", "user_id", name="tournament_participants_tournament_user_key"),
    )
    op.create_index("ix_tournament_participants_tournament_id", "tournament_participants", ["tournament_id"])
    op.create_index("ix_tournament_participants_user_id", "tournament_participants", ["user_id"])

    op.create_table(
        "tournament_messages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "tournament_id", sa.String(36), sa.ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("sender_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_announcement", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_tournament_messages_tournament_id", "tournament_messages", ["tournament_id"])

    # --- match_requests ---
    op.create_table(
        "match_requests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game", sa.String(128), nullable=False),
        sa.Column("mode", sa.String(64), nullable=False),
        sa.Column("platform", sa.String(64), nullable=False),
        sa.Column("language", sa.String(32), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), server_default="open", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_match_requests_user_id", "match_requests", ["user_id"])
    op.create_index("ix_match_requests_created_at", "match_requests", [sa.text("created_at DESC")])

    # --- tasks ---
    op.create_table(
        "tasks",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("reward_coins", sa.Integer(), server_default="0", nullable=False),
        sa.Column("reward_xp", sa.Integer(), server_default="0", nullable=False),
        sa.Column("sort_order", sa.Integer(), server_default="0", nullable=False),
    )
    op.create_table(
        "user_tasks",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("task_id", sa.String(64), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(16), server_default="completed", nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "task_id", name="user_tasks_user_task_key"),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("user_tasks")
    op.drop_table("tasks")
    op.drop_table("match_requests")
    op.drop_table("tournament_messages")
    op.drop_table("tournament_participants")
    op.drop_table("tournaments")
    op.drop_table("credit_transactions")
    op.drop_table("users")
