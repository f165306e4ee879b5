"""Tournament router: CRUD, paid registration, participants and messages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from playhub.auth.dependencies import get_current_user
from playhub.database import get_session
from playhub.db.models import Tournament, TournamentMessage, User
from playhub.redis_client import get_redis_or_none
from playhub.schemas import MessageResponse
from playhub.tournaments import service
from playhub.tournaments.schemas import (
    JoinRequest,
    JoinResponse,
    MessageCreateRequest,
    ParticipantResponse,
    TournamentCreateRequest,
    TournamentMessageResponse,
    TournamentResponse,
    TournamentUpdateRequest,
)

router = APIRouter(prefix="/api", tags=["Tournaments"])


def _tournament_out(tournament: Tournament, participant_count: int) -> TournamentResponse:
    out = TournamentResponse.model_validate(tournament)
    out.participant_count = participant_count
    return out


def _message_out(message: TournamentMessage) -> TournamentMessageResponse:
    out = TournamentMessageResponse.model_validate(message)
    out.sender_gamertag = message.sender.gamertag if message.sender else None
    return out


@router.get("/tournaments", response_model=list[TournamentResponse])
async def list_tournaments(db: AsyncSession = Depends(get_session)) -> list[TournamentResponse]:
    return [_tournament_out(t, n) for t, n in await service.list_tournaments(db)]


@router.post("/tournaments", response_model=TournamentResponse, status_code=status.HTTP_201_CREATED)
async def create_tournament(
    body: TournamentCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TournamentResponse:
    tournament = await service.create_tournament(db, user.id, **body.model_dump())
    await db.commit()
    return _tournament_out(tournament, 0)


@router.get("/tournaments/{tournament_id}", response_model=TournamentResponse)
async def get_tournament(tournament_id: str, db: AsyncSession = Depends(get_session)) -> TournamentResponse:
    tournament = await service.get_tournament(db, tournament_id)
    return _tournament_out(tournament, await service.count_participants(db, tournament_id))


@router.patch("/tournaments/{tournament_id}", response_model=TournamentResponse)
async def update_tournament(
    tournament_id: str,
    body: TournamentUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TournamentResponse:
    """Edit fields or advance status (upcoming -> active -> completed). Host/admin only."""
    tournament = await service.update_tournament(db, tournament_id, user, body.model_dump(exclude_unset=True))
    await db.commit()
    return _tournament_out(tournament, await service.count_participants(db, tournament_id))


@router.delete("/tournaments/{tournament_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tournament(
    tournament_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> None:
    await service.delete_tournament(db, tournament_id, user)
    await db.commit()


@router.post(
    "/tournaments/{tournament_id}/join-with-coins",
    response_model=JoinResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join_with_coins(
    tournament_id: str,
    body: JoinRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> JoinResponse:
    """Register and pay the entry fee in one transaction."""
    participant = await service.join_with_coins(
        db,
        tournament_id,
        user,
        game_details={"inGameName": body.in_game_name, "inGameId": body.in_game_id},
        teammate_ids=body.teammate_ids,
    )
    await db.commit()
    return JoinResponse(participant=ParticipantResponse.model_validate(participant), balance=user.coins)


@router.get("/tournaments/{tournament_id}/participants", response_model=list[ParticipantResponse])
async def list_participants(tournament_id: str, db: AsyncSession = Depends(get_session)) -> list[ParticipantResponse]:
    return [ParticipantResponse.model_validate(p) for p in await service.list_participants(db, tournament_id)]


@router.delete("/tournaments/{tournament_id}/participants/{participant_id}", response_model=MessageResponse)
async def remove_participant(
    tournament_id: str,
    participant_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await service.remove_participant(db, tournament_id, participant_id, user)
    await db.commit()
    return MessageResponse(message="Participant removed")


@router.get("/tournaments/{tournament_id}/messages", response_model=list[TournamentMessageResponse])
async def list_messages(
    tournament_id: str,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[TournamentMessageResponse]:
    return [_message_out(m) for m in await service.list_messages(db, tournament_id)]


@router.post(
    "/tournaments/{tournament_id}/messages",
    response_model=TournamentMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    tournament_id: str,
    body: MessageCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TournamentMessageResponse:
    """Post a query, or an announcement (host/admin) that is pushed to participants."""
    message = await service.send_message(db, tournament_id, user, body.message, body.is_announcement)
    await db.commit()
    await service.publish_announcement(db, get_redis_or_none(), message)
    return _message_out(message)


@router.get("/user/tournaments", response_model=list[TournamentResponse])
async def my_tournaments(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[TournamentResponse]:
    tournaments = await service.list_user_tournaments(db, user.id)
    return [_tournament_out(t, await service.count_participants(db, t.id)) for t in tournaments]
