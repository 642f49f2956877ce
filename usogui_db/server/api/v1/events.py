"""
Event Endpoints.

Story events with character and tag links. Listings are spoiler-gated on the
event's spoiler chapter (falling back to the chapter it occurs in).

Any signed-in user may submit an event; submissions by regular users start
unverified until a moderator approves them. Updates need a moderator and
deletion an admin.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.events import Event
from usogui_db.core.database.repositories.arcs import ArcRepository
from usogui_db.core.database.repositories.catalogue import TagRepository
from usogui_db.core.database.repositories.characters import CharacterRepository
from usogui_db.core.database.repositories.events import EventRepository
from usogui_db.core.database.repositories.gambles import GambleRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import EventType
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.events import ArcEventsRead, EventCreate, EventRead, EventUpdate
from usogui_db.core.monitoring import log_moderation_action
from usogui_db.server.services.content import ensure_ids_exist, event_reads, get_or_404
from usogui_db.server.services.deps import (
    AdminUser,
    CurrentUser,
    ModeratorUser,
    ProgressDep,
    SessionDep,
)
from usogui_db.server.services.pagination import PageDep, paginate
from usogui_db.server.services.spoilers import can_view_event

logger = get_logger(__name__)

router = APIRouter()

_LINK_FIELDS = {"character_ids", "tag_ids"}


async def _check_references(session, payload) -> None:
    """404 when the payload points at arcs, gambles, characters or tags that do not exist."""
    arc_id = getattr(payload, "arc_id", None)
    gamble_id = getattr(payload, "gamble_id", None)
    if arc_id is not None:
        await get_or_404(ArcRepository(session), arc_id, "Arc")
    if gamble_id is not None:
        await get_or_404(GambleRepository(session), gamble_id, "Gamble")
    if payload.character_ids:
        await ensure_ids_exist(CharacterRepository(session), payload.character_ids, "Characters")
    if payload.tag_ids:
        await ensure_ids_exist(TagRepository(session), payload.tag_ids, "Tags")


@router.get(
    "",
    response_model=Page[EventRead],
    summary="List Events",
    description="List events in chapter order with type, arc, gamble, character, tag and verification filters. "
    "Events past the reader's progress are hidden.",
)
async def list_events(
    response: Response,
    params: PageDep,
    session: SessionDep,
    progress: ProgressDep,
    search: Optional[str] = None,
    type: Optional[EventType] = None,
    arc_id: Optional[int] = None,
    gamble_id: Optional[int] = None,
    character_id: Optional[int] = None,
    tag_id: Optional[int] = None,
    is_verified: Optional[bool] = None,
) -> Page[EventRead]:
    repository = EventRepository(session)
    events, total = await repository.search(
        query=search,
        type=type,
        arc_id=arc_id,
        gamble_id=gamble_id,
        character_id=character_id,
        tag_id=tag_id,
        is_verified=is_verified,
        progress=progress,
        limit=params.limit,
        offset=params.offset,
    )
    return paginate(response, await event_reads(repository, events), total, params)


@router.get(
    "/grouped-by-arc",
    response_model=List[ArcEventsRead],
    summary="Events Grouped by Arc",
    description="Visible events grouped under their arc, arcs in reading order and events in chapter order. "
    "Events without an arc are listed last.",
)
async def get_events_grouped_by_arc(session: SessionDep, progress: ProgressDep) -> List[ArcEventsRead]:
    repository = EventRepository(session)
    events = await event_reads(repository, await repository.list_gated(progress=progress))
    by_arc: Dict[Optional[int], List[EventRead]] = {}
    for event in events:
        by_arc.setdefault(event.arc_id, []).append(event)

    groups = [
        ArcEventsRead(arc_id=arc.id, arc_name=arc.name, events=by_arc[arc.id])
        for arc in await ArcRepository(session).list_all()
        if arc.id in by_arc
    ]
    if None in by_arc:
        groups.append(ArcEventsRead(arc_id=None, arc_name=None, events=by_arc[None]))
    return groups


@router.get(
    "/{event_id}",
    response_model=EventRead,
    summary="Get Event",
    description="Retrieve an event. Events past the reader's progress are reported as not found.",
    responses={404: {"description": "Event not found"}},
)
async def get_event(event_id: int, session: SessionDep, progress: ProgressDep) -> EventRead:
    repository = EventRepository(session)
    event = await get_or_404(repository, event_id, "Event")
    if not can_view_event(event, progress):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    (read,) = await event_reads(repository, [event])
    return read


@router.post(
    "",
    response_model=EventRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Event",
    description="Submit an event. Events submitted by regular users start unverified.",
    responses={
        201: {"description": "Event created"},
        404: {"description": "Linked arc, gamble, character or tag not found"},
    },
)
async def create_event(payload: EventCreate, session: SessionDep, user: CurrentUser) -> EventRead:
    """
    Create an event.

    - **chapter_number**: Chapter in which the event occurs.
    - **spoiler_chapter**: Optional chapter from which the event may be shown.
    - **character_ids** / **tag_ids**: Linked characters and tags; all must exist.
    """
    await _check_references(session, payload)
    repository = EventRepository(session)
    values = payload.model_dump(exclude=_LINK_FIELDS)
    if not user.is_moderator:
        values["is_verified"] = False
    event = await repository.create(Event(**values, created_by_id=user.id))
    await repository.characters.replace(event.id, payload.character_ids, commit=False)
    await repository.tags.replace(event.id, payload.tag_ids)
    logger.info(f"Event {event.id} created by user {user.id}", extra={"event_id": event.id})
    (read,) = await event_reads(repository, [event])
    return read


@router.put(
    "/{event_id}",
    response_model=EventRead,
    summary="Update Event",
    responses={404: {"description": "Event or linked entity not found"}},
)
async def update_event(
    event_id: int, payload: EventUpdate, session: SessionDep, moderator: ModeratorUser
) -> EventRead:
    repository = EventRepository(session)
    event = await get_or_404(repository, event_id, "Event")
    await _check_references(session, payload)

    changes = payload.model_dump(exclude_unset=True, exclude=_LINK_FIELDS)
    event = await repository.apply_changes(event, changes)
    if payload.character_ids is not None:
        await repository.characters.replace(event.id, payload.character_ids)
    if payload.tag_ids is not None:
        await repository.tags.replace(event.id, payload.tag_ids)
    (read,) = await event_reads(repository, [event])
    return read


@router.put(
    "/{event_id}/approve",
    response_model=EventRead,
    summary="Approve Event",
    description="Mark a submitted event as verified.",
    responses={404: {"description": "Event not found"}},
)
async def approve_event(event_id: int, session: SessionDep, moderator: ModeratorUser) -> EventRead:
    repository = EventRepository(session)
    event = await get_or_404(repository, event_id, "Event")
    event = await repository.apply_changes(event, {"is_verified": True})
    log_moderation_action("approve", "event", event.id, moderator.id)
    (read,) = await event_reads(repository, [event])
    return read


@router.delete(
    "/{event_id}",
    response_model=MessageResponse,
    summary="Delete Event",
    responses={404: {"description": "Event not found"}},
)
async def delete_event(event_id: int, session: SessionDep, admin: AdminUser) -> MessageResponse:
    if not await EventRepository(session).delete(event_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return MessageResponse(message="Event deleted")
