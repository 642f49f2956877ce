"""
Gamble Endpoints.

Gambles with their participants, teams (and team members) and rounds.
Reads are public; mutations require a moderator.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.gambles import Gamble, GambleRound, GambleTeam, GambleTeamMember
from usogui_db.core.database.repositories.catalogue import ChapterRepository
from usogui_db.core.database.repositories.characters import CharacterRepository
from usogui_db.core.database.repositories.gambles import GambleRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.gambles import (
    GambleCreate,
    GambleDetail,
    GambleRead,
    GambleUpdate,
    RoundCreate,
    RoundRead,
    TeamCreate,
    TeamRead,
)
from usogui_db.server.services.content import ensure_ids_exist, gamble_detail, gamble_reads, get_or_404, team_read
from usogui_db.server.services.deps import ModeratorUser, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate

logger = get_logger(__name__)

router = APIRouter()


async def _check_chapter(session, chapter_id: Optional[int]) -> None:
    if chapter_id is not None:
        await get_or_404(ChapterRepository(session), chapter_id, "Chapter")


@router.get(
    "",
    response_model=Page[GambleRead],
    summary="List Gambles",
    description="List gambles filtered by a name/rules search, participant and starting chapter.",
)
async def list_gambles(
    response: Response,
    params: PageDep,
    session: SessionDep,
    search: Optional[str] = None,
    character_id: Optional[int] = None,
    chapter_id: Optional[int] = None,
) -> Page[GambleRead]:
    repository = GambleRepository(session)
    gambles, total = await repository.search(
        query=search, character_id=character_id, chapter_id=chapter_id, limit=params.limit, offset=params.offset
    )
    return paginate(response, await gamble_reads(repository, gambles), total, params)


@router.get(
    "/{gamble_id}",
    response_model=GambleDetail,
    summary="Get Gamble",
    description="Retrieve a gamble with its participants, teams (with members) and rounds.",
    responses={404: {"description": "Gamble not found"}},
)
async def get_gamble(gamble_id: int, session: SessionDep) -> GambleDetail:
    repository = GambleRepository(session)
    gamble = await get_or_404(repository, gamble_id, "Gamble")
    return await gamble_detail(repository, gamble)


@router.post(
    "",
    response_model=GambleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Gamble",
    responses={
        201: {"description": "Gamble created"},
        404: {"description": "Chapter or participant not found"},
    },
)
async def create_gamble(payload: GambleCreate, session: SessionDep, moderator: ModeratorUser) -> GambleRead:
    await _check_chapter(session, payload.chapter_id)
    await ensure_ids_exist(CharacterRepository(session), payload.participant_ids, "Characters")
    repository = GambleRepository(session)
    gamble = await repository.create(Gamble(**payload.model_dump(exclude={"participant_ids"})))
    await repository.participants.replace(gamble.id, payload.participant_ids)
    logger.info(f"Gamble {gamble.id} ({gamble.name}) created by user {moderator.id}")
    (read,) = await gamble_reads(repository, [gamble])
    return read


@router.put(
    "/{gamble_id}",
    response_model=GambleRead,
    summary="Update Gamble",
    responses={404: {"description": "Gamble, chapter or participant not found"}},
)
async def update_gamble(
    gamble_id: int, payload: GambleUpdate, session: SessionDep, moderator: ModeratorUser
) -> GambleRead:
    repository = GambleRepository(session)
    gamble = await get_or_404(repository, gamble_id, "Gamble")
    changes = payload.model_dump(exclude_unset=True, exclude={"participant_ids"})
    await _check_chapter(session, changes.get("chapter_id"))
    if payload.participant_ids is not None:
        await ensure_ids_exist(CharacterRepository(session), payload.participant_ids, "Characters")

    gamble = await repository.apply_changes(gamble, changes)
    if payload.participant_ids is not None:
        await repository.participants.replace(gamble.id, payload.participant_ids)
    (read,) = await gamble_reads(repository, [gamble])
    return read


@router.delete(
    "/{gamble_id}",
    response_model=MessageResponse,
    summary="Delete Gamble",
    responses={404: {"description": "Gamble not found"}},
)
async def delete_gamble(gamble_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    if not await GambleRepository(session).delete(gamble_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Gamble not found")
    return MessageResponse(message="Gamble deleted")


# =====================================================================
# Teams
# =====================================================================


@router.get(
    "/{gamble_id}/teams",
    response_model=List[TeamRead],
    summary="List Teams",
    responses={404: {"description": "Gamble not found"}},
)
async def list_teams(gamble_id: int, session: SessionDep) -> List[TeamRead]:
    repository = GambleRepository(session)
    await get_or_404(repository, gamble_id, "Gamble")
    return [team_read(team, members) for team, members in await repository.list_teams(gamble_id)]


@router.post(
    "/{gamble_id}/teams",
    response_model=TeamRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Team",
    description="Create a team with its members.",
    responses={
        201: {"description": "Team created"},
        404: {"description": "Gamble or character not found"},
    },
)
async def create_team(
    gamble_id: int, payload: TeamCreate, session: SessionDep, moderator: ModeratorUser
) -> TeamRead:
    repository = GambleRepository(session)
    await get_or_404(repository, gamble_id, "Gamble")
    character_ids = [member.character_id for member in payload.members]
    if payload.supported_gambler_id is not None:
        character_ids.append(payload.supported_gambler_id)
    await ensure_ids_exist(CharacterRepository(session), character_ids, "Characters")
    if len({member.character_id for member in payload.members}) != len(payload.members):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="A character can only join a team once")

    team, members = await repository.create_team(
        GambleTeam(gamble_id=gamble_id, **payload.model_dump(exclude={"members"})),
        [GambleTeamMember(**member.model_dump()) for member in payload.members],
    )
    return team_read(team, members)


@router.delete(
    "/{gamble_id}/teams/{team_id}",
    response_model=MessageResponse,
    summary="Delete Team",
    responses={404: {"description": "Team not found"}},
)
async def delete_team(gamble_id: int, team_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    repository = GambleRepository(session)
    team = await repository.get_team(gamble_id, team_id)
    if team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    await repository.delete_team(team)
    return MessageResponse(message="Team deleted")


# =====================================================================
# Rounds
# =====================================================================


@router.get(
    "/{gamble_id}/rounds",
    response_model=List[RoundRead],
    summary="List Rounds",
    responses={404: {"description": "Gamble not found"}},
)
async def list_rounds(gamble_id: int, session: SessionDep) -> List[RoundRead]:
    repository = GambleRepository(session)
    await get_or_404(repository, gamble_id, "Gamble")
    return [RoundRead.model_validate(round_) for round_ in await repository.list_rounds(gamble_id)]


@router.post(
    "/{gamble_id}/rounds",
    response_model=RoundRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Round",
    responses={
        201: {"description": "Round created"},
        400: {"description": "Winner team does not belong to this gamble"},
        404: {"description": "Gamble not found"},
        409: {"description": "Round number already exists"},
    },
)
async def create_round(
    gamble_id: int, payload: RoundCreate, session: SessionDep, moderator: ModeratorUser
) -> RoundRead:
    repository = GambleRepository(session)
    await get_or_404(repository, gamble_id, "Gamble")
    if await repository.get_round_by_number(gamble_id, payload.round_number):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=f"Round {payload.round_number} already exists"
        )
    if payload.winner_team_id is not None and await repository.get_team(gamble_id, payload.winner_team_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Winner team does not belong to this gamble"
        )
    round_ = await repository.create_round(GambleRound(gamble_id=gamble_id, **payload.model_dump()))
    return RoundRead.model_validate(round_)
