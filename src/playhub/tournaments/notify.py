"""Fan tournament announcements out over Redis pub/sub.

Each participant's ``ws:user:{user_id}`` channel receives the payload; the
socket gateway that delivers it to devices lives outside this service.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playhub.db.models import TournamentMessage

logger = logging.getLogger(__name__)


async def push_announcement(
    redis: object | None,
    message: TournamentMessage,
    recipient_ids: Iterable[int],
) -> int:
    """Publish an announcement to every recipient. Returns channels published to.

    Failures are logged and skipped; the message itself is already stored.
    """
    if redis is None:
        return 0

    payload = json.dumps({
        "event": "tournament_announcement",
        "data": {
            "id": message.id,
            "tournamentId": message.tournament_id,
            "message": message.message,
            "timestamp": message.created_at.isoformat() if message.created_at else None,
        },
    })
    published = 0
    for user_id in recipient_ids:
        if user_id == message.sender_id:
            continue
        try:
            await redis.publish(f"ws:user:{user_id}", payload)  # type: ignore[union-attr]
            published += 1
        except Exception:
            logger.warning("Failed to push announcement via ws:user:%s", user_id, exc_info=True)
    return published
