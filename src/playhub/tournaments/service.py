"""Tournament registry: lifecycle, paid registration and in-tournament messages.

Rules:
- Status only moves forward: upcoming -> active -> completed
- Completed tournaments accept no registrations
- The entry fee is charged from the tournament row, never from the client
- Charging the fee and inserting the participant share one transaction
- Team tournaments (players_per_team > 1) register as "pending"
- Only the host or an admin may edit, delete, remove players or announce
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError

from playhub.clock import utcnow
from playhub.credits.ledger import deduct_credits
from playhub.db.models import (
    Tournament,
    TournamentMessage,
    TournamentParticipant,
    User,
)
from playhub.errors import Forbidden, NotFound, ValidationError
from playhub.tournaments.notify import push_announcement
from playhub.users.service import set_game_profile

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

VALID_TRANSITIONS: dict[str, list[str]] = {
    "upcoming": ["active"],
    "active": ["completed"],
    "completed": [],
}

EDITABLE_FIELDS = frozenset({
    "name", "game_name", "prize_pool", "entry_fee", "max_participants", "players_per_team", "start_time",
})


def validate_transition(current_status: str, target_status: str) -> None:
    """Raise ValidationError unless current -> target is a forward step."""
    valid = VALID_TRANSITIONS.get(current_status, [])
    if target_status not in valid:
        msg = f"Invalid transition: {current_status} -> {target_status}. Valid transitions: {valid}"
        raise ValidationError(msg)


def can_manage(tournament: Tournament, user: User) -> bool:
    return user.is_admin or tournament.created_by == user.id


def _require_manager(tournament: Tournament, user: User) -> None:
    if not can_manage(tournament, user):
        msg = "Only the tournament host or an admin can do this"
        raise Forbidden(msg)


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------


async def get_tournament(db: AsyncSession, tournament_id: str) -> Tournament:
    tournament = await db.get(Tournament, tournament_id)
    if tournament is None:
        msg = "Tournament not found"
        raise NotFound(msg)
    return tournament


async def count_participants(db: AsyncSession, tournament_id: str) -> int:
    count = await db.scalar(
        select(func.count()).select_from(TournamentParticipant).where(
            TournamentParticipant.tournament_id == tournament_id
        )
    )
    return count or 0


def registration_lock(tournament_id: str) -> Select[tuple[Tournament]]:
    """Load a tournament under a row lock so capacity checks serialize per tournament."""
    return (
        select(Tournament)
        .where(Tournament.id == tournament_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


async def create_tournament(
    db: AsyncSession,
    host_id: int,
    *,
    name: str,
    game_name: str,
    max_participants: int,
    prize_pool: int = 0,
    entry_fee: int = 0,
    players_per_team: int = 1,
    start_time: datetime | None = None,
    now: datetime | None = None,
) -> Tournament:
    """Create an upcoming tournament hosted by ``host_id``."""
    if not name or not name.strip():
        msg = "Tournament name is required"
        raise ValidationError(msg)
    if max_participants < 2:
        msg = "A tournament needs at least 2 participants"
        raise ValidationError(msg)
    if entry_fee < 0 or prize_pool < 0:
        msg = "Entry fee and prize pool cannot be negative"
        raise ValidationError(msg)
    if players_per_team < 1:
        msg = "Players per team must be at least 1"
        raise ValidationError(msg)

    tournament = Tournament(
        name=name.strip(),
        game_name=game_name.strip(),
        prize_pool=prize_pool,
        entry_fee=entry_fee,
        max_participants=max_participants,
        players_per_team=players_per_team,
        start_time=start_time,
        status="upcoming",
        created_by=host_id,
        created_at=now or utcnow(),
    )
    db.add(tournament)
    await db.flush()
    logger.info("tournament_created", tournament_id=tournament.id, host_id=host_id)
    return tournament


async def list_tournaments(db: AsyncSession) -> list[tuple[Tournament, int]]:
    """All tournaments, newest first, with their participant counts.

    Callers split active from completed by ``status``.
    """
    counts = (
        select(
            TournamentParticipant.tournament_id,
            func.count(TournamentParticipant.id).label("n"),
        )
        .group_by(TournamentParticipant.tournament_id)
        .subquery()
    )
    result = await db.execute(
        select(Tournament, func.coalesce(counts.c.n, 0))
        .outerjoin(counts, counts.c.tournament_id == Tournament.id)
        .order_by(Tournament.created_at.desc())
    )
    return [(t, n) for t, n in result.all()]


async def list_user_tournaments(db: AsyncSession, user_id: int) -> list[Tournament]:
    """Tournaments the user is registered in."""
    result = await db.execute(
        select(Tournament)
        .join(TournamentParticipant, TournamentParticipant.tournament_id == Tournament.id)
        .where(TournamentParticipant.user_id == user_id)
        .order_by(Tournament.created_at.desc())
    )
    return list(result.scalars().all())


async def update_tournament(
    db: AsyncSession,
    tournament_id: str,
    requester: User,
    changes: dict[str, Any],
) -> Tournament:
    """Edit a tournament and/or advance its status."""
    tournament = await get_tournament(db, tournament_id)
    _require_manager(tournament, requester)

    status = changes.pop("status", None)
    if status is not None and status != tournament.status:
        validate_transition(tournament.status, status)
        tournament.status = status

    for field, value in changes.items():
        if field not in EDITABLE_FIELDS:
            msg = f"Field cannot be edited: {field}"
            raise ValidationError(msg)
        if value is None and field != "start_time":
            continue
        setattr(tournament, field, value)

    if tournament.max_participants < 2:
        msg = "A tournament needs at least 2 participants"
        raise ValidationError(msg)

    await db.flush()
    logger.info("tournament_updated", tournament_id=tournament_id, status=tournament.status)
    return tournament


async def delete_tournament(db: AsyncSession, tournament_id: str, requester: User) -> None:
    """Delete a tournament; participants and messages go with it (FK cascade)."""
    tournament = await get_tournament(db, tournament_id)
    _require_manager(tournament, requester)
    await db.execute(delete(Tournament).where(Tournament.id == tournament_id))
    logger.info("tournament_deleted", tournament_id=tournament_id, requester_id=requester.id)


# ---------------------------------------------------------------------------
# Participants
# ---------------------------------------------------------------------------


async def join_with_coins(
    db: AsyncSession,
    tournament_id: str,
    user: User,
    game_details: dict[str, Any] | None = None,
    teammate_ids: list[int] | None = None,
    now: datetime | None = None,
) -> TournamentParticipant:
    """
    Register ``user`` and charge the tournament's entry fee.

    Raises:
        NotFound: Unknown tournament or teammate.
        ValidationError: Tournament completed or full, already registered,
            or bad teammate list.
        InsufficientFunds: Balance below the entry fee. No row is created.
    """
    tournament = (await db.execute(registration_lock(tournament_id))).scalar_one_or_none()
    if tournament is None:
        msg = "Tournament not found"
        raise NotFound(msg)
    if tournament.status == "completed":
        msg = "Tournament is already completed"
        raise ValidationError(msg)

    existing = await db.scalar(
        select(TournamentParticipant.id).where(
            TournamentParticipant.tournament_id == tournament_id,
            TournamentParticipant.user_id == user.id,
        )
    )
    if existing is not None:
        msg = "Already registered for this tournament"
        raise ValidationError(msg)

    if await count_participants(db, tournament_id) >= tournament.max_participants:
        msg = "Tournament is full"
        raise ValidationError(msg)

    teammates = list(dict.fromkeys(teammate_ids or []))
    if user.id in teammates:
        msg = "You cannot list yourself as a teammate"
        raise ValidationError(msg)
    if len(teammates) > tournament.players_per_team - 1:
        msg = f"At most {tournament.players_per_team - 1} teammates allowed"
        raise ValidationError(msg)
    if teammates:
        found = await db.scalar(select(func.count()).select_from(User).where(User.id.in_(teammates)))
        if found != len(teammates):
            msg = "Teammate not found"
            raise NotFound(msg)

    if now is None:
        now = utcnow()
    if tournament.entry_fee > 0:
        await deduct_credits(db, user.id, tournament.entry_fee, "tournament_entry", now=now)

    participant = TournamentParticipant(
        tournament_id=tournament_id,
        user_id=user.id,
        user=user,
        game_details=game_details,
        teammate_ids=teammates,
        status="pending" if tournament.players_per_team > 1 else "registered",
        created_at=now,
    )
    db.add(participant)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent registration; the caller rolls back the charge
        msg = "Already registered for this tournament"
        raise ValidationError(msg) from e

    if game_details:
        await set_game_profile(
            db, user, tournament.game_name, game_details.get("inGameName"), game_details.get("inGameId")
        )

    logger.info(
        "tournament_joined",
        tournament_id=tournament_id,
        user_id=user.id,
        entry_fee=tournament.entry_fee,
        status=participant.status,
    )
    return participant


async def list_participants(db: AsyncSession, tournament_id: str) -> list[TournamentParticipant]:
    await get_tournament(db, tournament_id)
    result = await db.execute(
        select(TournamentParticipant)
        .where(TournamentParticipant.tournament_id == tournament_id)
        .order_by(TournamentParticipant.created_at.asc())
    )
    return list(result.scalars().unique().all())


async def remove_participant(
    db: AsyncSession,
    tournament_id: str,
    participant_id: str,
    requester: User,
) -> None:
    """Remove a registration. Host or admin only; the entry fee is not refunded."""
    tournament = await get_tournament(db, tournament_id)
    _require_manager(tournament, requester)

    result = await db.execute(
        select(TournamentParticipant).where(
            TournamentParticipant.id == participant_id,
            TournamentParticipant.tournament_id == tournament_id,
        )
    )
    participant = result.unique().scalar_one_or_none()
    if participant is None:
        msg = "Participant not found"
        raise NotFound(msg)

    await db.delete(participant)
    await db.flush()
    logger.info(
        "tournament_participant_removed",
        tournament_id=tournament_id,
        participant_id=participant_id,
        requester_id=requester.id,
    )


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


async def send_message(
    db: AsyncSession,
    tournament_id: str,
    sender: User,
    message: str,
    is_announcement: bool = False,
    now: datetime | None = None,
) -> TournamentMessage:
    """Post a query (anyone) or an announcement (host/admin only)."""
    tournament = await get_tournament(db, tournament_id)
    if not message or not message.strip():
        msg = "Message cannot be empty"
        raise ValidationError(msg)
    if is_announcement:
        _require_manager(tournament, sender)

    msg_row = TournamentMessage(
        tournament_id=tournament_id,
        sender_id=sender.id,
        sender=sender,
        message=message.strip(),
        is_announcement=is_announcement,
        created_at=now or utcnow(),
    )
    db.add(msg_row)
    await db.flush()
    logger.info(
        "tournament_message_sent",
        tournament_id=tournament_id,
        sender_id=sender.id,
        is_announcement=is_announcement,
    )
    return msg_row


async def publish_announcement(db: AsyncSession, redis: object | None, message: TournamentMessage) -> int:
    """Push a committed announcement to every registered participant."""
    if not message.is_announcement:
        return 0
    result = await db.execute(
        select(TournamentParticipant.user_id).where(TournamentParticipant.tournament_id == message.tournament_id)
    )
    return await push_announcement(redis, message, result.scalars().all())


async def list_messages(db: AsyncSession, tournament_id: str) -> list[TournamentMessage]:
    """Messages newest first; clients split announcements from queries by flag."""
    await get_tournament(db, tournament_id)
    result = await db.execute(
        select(TournamentMessage)
        .where(TournamentMessage.tournament_id == tournament_id)
        .order_by(TournamentMessage.created_at.desc(), TournamentMessage.id)
    )
    return list(result.scalars().unique().all())
