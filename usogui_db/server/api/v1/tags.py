"""
Tag Endpoints.

Tags label events and guides. Tag names are unique (case-insensitive).
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.tags import Tag
from usogui_db.core.database.repositories.catalogue import TagRepository
from usogui_db.core.database.repositories.events import EventRepository
from usogui_db.core.database.repositories.guides import GuideRepository
from usogui_db.core.models.domain import GuideStatus, Language, TranslatableEntity
from usogui_db.core.models.io.catalogue import TagCreate, TagRead, TagUpdate
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.events import EventRead
from usogui_db.core.models.io.guides import GuideRead
from usogui_db.server.services.content import event_reads, get_or_404, guide_reads
from usogui_db.server.services.deps import ModeratorUser, ProgressDep, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate
from usogui_db.server.services.translations import TranslationService

router = APIRouter()


@router.get("", response_model=Page[TagRead], summary="List Tags", description="List tags by name.")
async def list_tags(
    response: Response,
    params: PageDep,
    session: SessionDep,
    name: Optional[str] = None,
    lang: Optional[Language] = None,
) -> Page[TagRead]:
    items, total = await TagRepository(session).search(query=name, limit=params.limit, offset=params.offset)
    page = paginate(response, items, total, params, TagRead.model_validate)
    page.data = await TranslationService(session).localize_many(TranslatableEntity.tag, page.data, lang)
    return page


@router.get("/{tag_id}", response_model=TagRead, summary="Get Tag", responses={404: {"description": "Tag not found"}})
async def get_tag(tag_id: int, session: SessionDep, lang: Optional[Language] = None) -> TagRead:
    tag = await get_or_404(TagRepository(session), tag_id, "Tag")
    return await TranslationService(session).localize(TranslatableEntity.tag, TagRead.model_validate(tag), lang)


@router.get(
    "/{tag_id}/events",
    response_model=List[EventRead],
    summary="Tagged Events",
    description="Events carrying the tag, spoiler-gated.",
    responses={404: {"description": "Tag not found"}},
)
async def get_tag_events(tag_id: int, session: SessionDep, progress: ProgressDep) -> List[EventRead]:
    await get_or_404(TagRepository(session), tag_id, "Tag")
    repository = EventRepository(session)
    events, _ = await repository.search(tag_id=tag_id, progress=progress, limit=1000, offset=0)
    return await event_reads(repository, events)


@router.get(
    "/{tag_id}/guides",
    response_model=List[GuideRead],
    summary="Tagged Guides",
    description="Published guides carrying the tag.",
    responses={404: {"description": "Tag not found"}},
)
async def get_tag_guides(tag_id: int, session: SessionDep) -> List[GuideRead]:
    await get_or_404(TagRepository(session), tag_id, "Tag")
    repository = GuideRepository(session)
    guides, _ = await repository.search(tag_id=tag_id, status=GuideStatus.published, limit=1000, offset=0)
    return await guide_reads(repository, guides)


@router.post(
    "",
    response_model=TagRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Tag",
    responses={
        201: {"description": "Tag created"},
        409: {"description": "Tag name already exists"},
    },
)
async def create_tag(payload: TagCreate, session: SessionDep, moderator: ModeratorUser) -> TagRead:
    repository = TagRepository(session)
    if await repository.get_by_name(payload.name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Tag with this name already exists")
    tag = await repository.create(Tag.model_validate(payload))
    return TagRead.model_validate(tag)


@router.put(
    "/{tag_id}",
    response_model=TagRead,
    summary="Update Tag",
    responses={
        404: {"description": "Tag not found"},
        409: {"description": "Tag name already exists"},
    },
)
async def update_tag(tag_id: int, payload: TagUpdate, session: SessionDep, moderator: ModeratorUser) -> TagRead:
    repository = TagRepository(session)
    tag = await get_or_404(repository, tag_id, "Tag")
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("name"):
        existing = await repository.get_by_name(changes["name"])
        if existing is not None and existing.id != tag_id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Tag with this name already exists")
    tag = await repository.apply_changes(tag, changes)
    return TagRead.model_validate(tag)


@router.delete(
    "/{tag_id}",
    response_model=MessageResponse,
    summary="Delete Tag",
    responses={404: {"description": "Tag not found"}},
)
async def delete_tag(tag_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    if not await TagRepository(session).delete(tag_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    return MessageResponse(message="Tag deleted")
