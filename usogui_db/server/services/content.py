"""
Helpers shared by the content routers.

Loading rows or failing with 404, checking linked ids, and assembling read
models whose link ids live in join tables (events, gambles, guides).
"""

from __future__ import annotations

from typing import List, Sequence, TypeVar

from fastapi import HTTPException, status

from usogui_db.core.database.entities.events import Event
from usogui_db.core.database.entities.gambles import Gamble
from usogui_db.core.database.entities.guides import Guide
from usogui_db.core.database.repositories.base import SQLModelRepository
from usogui_db.core.database.repositories.events import EventRepository
from usogui_db.core.database.repositories.gambles import GambleRepository
from usogui_db.core.database.repositories.guides import GuideRepository
from usogui_db.core.models.io.events import EventRead
from usogui_db.core.models.io.gambles import GambleDetail, GambleRead, RoundRead, TeamMemberRead, TeamRead
from usogui_db.core.models.io.guides import GuideRead

EntityType = TypeVar("EntityType")


async def get_or_404(repository: SQLModelRepository[EntityType], entity_id: int, label: str) -> EntityType:
    """Load ``entity_id`` or raise 404 ``"<label> not found"``."""
    entity = await repository.get_by_id(entity_id)
    if entity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return entity


async def ensure_ids_exist(repository: SQLModelRepository, ids: Sequence[int], label: str) -> None:
    """Raise 404 naming the first ids that have no row."""
    missing = await repository.missing_ids(ids)
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found: {', '.join(str(entity_id) for entity_id in missing)}",
        )


def check_chapter_range(start: int | None, end: int | None) -> None:
    if start is not None and end is not None and end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End chapter must be greater than or equal to start chapter",
        )


async def event_reads(repository: EventRepository, events: Sequence[Event]) -> List[EventRead]:
    ids = [event.id for event in events]
    characters = await repository.characters.get_many(ids)
    tags = await repository.tags.get_many(ids)
    return [
        EventRead.model_validate(event).model_copy(
            update={"character_ids": characters[event.id], "tag_ids": tags[event.id]}
        )
        for event in events
    ]


async def gamble_reads(repository: GambleRepository, gambles: Sequence[Gamble]) -> List[GambleRead]:
    participants = await repository.participants.get_many([gamble.id for gamble in gambles])
    return [
        GambleRead.model_validate(gamble).model_copy(update={"participant_ids": participants[gamble.id]})
        for gamble in gambles
    ]


def team_read(team, members) -> TeamRead:
    return TeamRead.model_validate(team).model_copy(
        update={"members": [TeamMemberRead.model_validate(member) for member in members]}
    )


async def gamble_detail(repository: GambleRepository, gamble: Gamble) -> GambleDetail:
    """A gamble with participants, teams (with members) and rounds."""
    (base,) = await gamble_reads(repository, [gamble])
    teams = await repository.list_teams(gamble.id)
    rounds = await repository.list_rounds(gamble.id)
    return GambleDetail(
        **base.model_dump(),
        teams=[team_read(team, members) for team, members in teams],
        rounds=[RoundRead.model_validate(round_) for round_ in rounds],
    )


async def guide_reads(repository: GuideRepository, guides: Sequence[Guide]) -> List[GuideRead]:
    ids = [guide.id for guide in guides]
    tags = await repository.tags.get_many(ids)
    characters = await repository.characters.get_many(ids)
    gambles = await repository.gambles.get_many(ids)
    return [
        GuideRead.model_validate(guide).model_copy(
            update={"tag_ids": tags[guide.id], "character_ids": characters[guide.id], "gamble_ids": gambles[guide.id]}
        )
        for guide in guides
    ]
