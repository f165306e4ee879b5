"""Task seed data, upserted on startup."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from playhub.db.models import Task

logger = logging.getLogger(__name__)

TASK_SEED_DATA: list[dict] = [
    {
        "id": "complete_profile",
        "title": "Complete your profile",
        "description": "Add a profile picture and a bio",
        "type": "one_time",
        "reward_coins": 20,
        "reward_xp": 25,
        "sort_order": 1,
    },
    {
        "id": "add_game_profile",
        "title": "Link a game",
        "description": "Save your in-game name and ID for at least one game",
        "type": "one_time",
        "reward_coins": 15,
        "reward_xp": 20,
        "sort_order": 2,
    },
    {
        "id": "first_match_request",
        "title": "Find your squad",
        "description": "Post your first match request",
        "type": "one_time",
        "reward_coins": 10,
        "reward_xp": 30,
        "sort_order": 3,
    },
    {
        "id": "join_tournament",
        "title": "Enter the arena",
        "description": "Register for your first tournament",
        "type": "one_time",
        "reward_coins": 25,
        "reward_xp": 50,
        "sort_order": 4,
    },
    {
        "id": "invite_friend",
        "title": "Bring a friend",
        "description": "Invite a friend who signs up",
        "type": "social",
        "reward_coins": 50,
        "reward_xp": 100,
        "sort_order": 5,
    },
]


async def seed_tasks(db: AsyncSession) -> int:
    """Upsert all task definitions. Returns number of tasks seeded."""
    for task_data in TASK_SEED_DATA:
        await db.merge(Task(**task_data))
    await db.commit()
    logger.info("Seeded %d task definitions", len(TASK_SEED_DATA))
    return len(TASK_SEED_DATA)
