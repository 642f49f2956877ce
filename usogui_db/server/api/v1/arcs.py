"""
Arc Endpoints.

Arcs are ordered story sections with an optional chapter range and parent
arc. ``/{id}/events`` is spoiler-gated; ``/{id}/gambles`` lists the gambles
starting inside the arc's chapter range.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.arcs import Arc
from usogui_db.core.database.repositories.arcs import ArcRepository
from usogui_db.core.database.repositories.events import EventRepository
from usogui_db.core.database.repositories.gambles import GambleRepository
from usogui_db.core.models.domain import Language, TranslatableEntity
from usogui_db.core.models.io.catalogue import ArcCreate, ArcRead, ArcUpdate
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.events import EventRead
from usogui_db.core.models.io.gambles import GambleRead
from usogui_db.server.services.content import check_chapter_range, event_reads, gamble_reads, get_or_404
from usogui_db.server.services.deps import ModeratorUser, ProgressDep, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate
from usogui_db.server.services.translations import TranslationService

router = APIRouter()


@router.get(
    "",
    response_model=Page[ArcRead],
    summary="List Arcs",
    description="List arcs in reading order, filtered by name, series and parent arc.",
)
async def list_arcs(
    response: Response,
    params: PageDep,
    session: SessionDep,
    name: Optional[str] = None,
    series_id: Optional[int] = None,
    parent_id: Optional[int] = None,
    lang: Optional[Language] = None,
) -> Page[ArcRead]:
    items, total = await ArcRepository(session).search(
        query=name, series_id=series_id, parent_id=parent_id, limit=params.limit, offset=params.offset
    )
    page = paginate(response, items, total, params, ArcRead.model_validate)
    page.data = await TranslationService(session).localize_many(TranslatableEntity.arc, page.data, lang)
    return page


@router.get(
    "/{arc_id}",
    response_model=ArcRead,
    summary="Get Arc",
    responses={404: {"description": "Arc not found"}},
)
async def get_arc(arc_id: int, session: SessionDep, lang: Optional[Language] = None) -> ArcRead:
    arc = await get_or_404(ArcRepository(session), arc_id, "Arc")
    return await TranslationService(session).localize(TranslatableEntity.arc, ArcRead.model_validate(arc), lang)


@router.get(
    "/{arc_id}/events",
    response_model=List[EventRead],
    summary="Arc Events",
    description="Events of an arc in chapter order, hidden past the reader's progress.",
    responses={404: {"description": "Arc not found"}},
)
async def get_arc_events(arc_id: int, session: SessionDep, progress: ProgressDep) -> List[EventRead]:
    await get_or_404(ArcRepository(session), arc_id, "Arc")
    repository = EventRepository(session)
    events = await repository.list_gated(progress=progress, arc_id=arc_id)
    return await event_reads(repository, events)


@router.get(
    "/{arc_id}/gambles",
    response_model=List[GambleRead],
    summary="Arc Gambles",
    description="Gambles whose starting chapter falls within the arc's chapter range.",
    responses={404: {"description": "Arc not found"}},
)
async def get_arc_gambles(arc_id: int, session: SessionDep) -> List[GambleRead]:
    repository = ArcRepository(session)
    arc = await get_or_404(repository, arc_id, "Arc")
    gambles = await repository.gambles_in_arc(arc)
    return await gamble_reads(GambleRepository(session), gambles)


async def _check_parent(repository: ArcRepository, parent_id: Optional[int], arc_id: Optional[int] = None) -> None:
    if parent_id is None:
        return
    if parent_id == arc_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="An arc cannot be its own parent")
    parent = await repository.get_by_id(parent_id)
    if parent is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parent arc not found")
    if arc_id is None:
        return
    # Walk up from the new parent; reaching the arc again would close a loop
    seen = {parent_id}
    while parent.parent_id is not None and parent.parent_id not in seen:
        if parent.parent_id == arc_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="An arc cannot be nested under its own descendant"
            )
        seen.add(parent.parent_id)
        parent = await repository.get_by_id(parent.parent_id)
        if parent is None:
            break


@router.post(
    "",
    response_model=ArcRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Arc",
    responses={
        201: {"description": "Arc created"},
        404: {"description": "Parent arc not found"},
    },
)
async def create_arc(payload: ArcCreate, session: SessionDep, moderator: ModeratorUser) -> ArcRead:
    repository = ArcRepository(session)
    await _check_parent(repository, payload.parent_id)
    arc = await repository.create(Arc.model_validate(payload))
    return ArcRead.model_validate(arc)


@router.put(
    "/{arc_id}",
    response_model=ArcRead,
    summary="Update Arc",
    responses={
        400: {"description": "Invalid chapter range or parent"},
        404: {"description": "Arc not found"},
    },
)
async def update_arc(arc_id: int, payload: ArcUpdate, session: SessionDep, moderator: ModeratorUser) -> ArcRead:
    repository = ArcRepository(session)
    arc = await get_or_404(repository, arc_id, "Arc")
    changes = payload.model_dump(exclude_unset=True)
    check_chapter_range(changes.get("start_chapter", arc.start_chapter), changes.get("end_chapter", arc.end_chapter))
    await _check_parent(repository, changes.get("parent_id"), arc_id)
    arc = await repository.apply_changes(arc, changes)
    return ArcRead.model_validate(arc)


@router.delete(
    "/{arc_id}",
    response_model=MessageResponse,
    summary="Delete Arc",
    responses={404: {"description": "Arc not found"}},
)
async def delete_arc(arc_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    if not await ArcRepository(session).delete(arc_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Arc not found")
    return MessageResponse(message="Arc deleted")
