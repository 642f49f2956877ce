"""
Guide Endpoints.

Community guides go through moderation: new guides start ``pending``, a
moderator publishes or rejects them, and an author's edit of a published or
rejected guide sends it back to ``pending``. Anonymous readers only ever see
published guides.
"""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query, Response, status

from usogui_db.core.database.entities.guides import Guide
from usogui_db.core.database.entities.users import User
from usogui_db.core.database.repositories.arcs import ArcRepository
from usogui_db.core.database.repositories.catalogue import TagRepository
from usogui_db.core.database.repositories.characters import CharacterRepository
from usogui_db.core.database.repositories.gambles import GambleRepository
from usogui_db.core.database.repositories.guides import GuideRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import GuideStatus
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.guides import GuideCreate, GuideLikeResult, GuideRead, GuideReject, GuideUpdate
from usogui_db.core.monitoring import log_moderation_action
from usogui_db.server.services.content import ensure_ids_exist, get_or_404, guide_reads
from usogui_db.server.services.deps import CurrentUser, ModeratorUser, OptionalUser, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate

logger = get_logger(__name__)

router = APIRouter()

_LINK_FIELDS = {"tag_ids", "character_ids", "gamble_ids"}


def _can_manage(guide: Guide, user: Optional[User]) -> bool:
    return user is not None and (user.is_moderator or guide.author_id == user.id)


async def _check_links(session, payload) -> None:
    if payload.arc_id is not None:
        await get_or_404(ArcRepository(session), payload.arc_id, "Arc")
    if payload.tag_ids:
        await ensure_ids_exist(TagRepository(session), payload.tag_ids, "Tags")
    if payload.character_ids:
        await ensure_ids_exist(CharacterRepository(session), payload.character_ids, "Characters")
    if payload.gamble_ids:
        await ensure_ids_exist(GambleRepository(session), payload.gamble_ids, "Gambles")


async def _replace_links(repository: GuideRepository, guide_id: int, payload) -> None:
    if payload.tag_ids is not None:
        await repository.tags.replace(guide_id, payload.tag_ids, commit=False)
    if payload.character_ids is not None:
        await repository.characters.replace(guide_id, payload.character_ids, commit=False)
    if payload.gamble_ids is not None:
        await repository.gambles.replace(guide_id, payload.gamble_ids, commit=False)
    await repository.session.commit()


async def _read(repository: GuideRepository, guide: Guide) -> GuideRead:
    (read,) = await guide_reads(repository, [guide])
    return read


@router.get(
    "",
    response_model=Page[GuideRead],
    summary="List Guides",
    description="List guides with search, link filters and sorting. Only moderators, or authors listing "
    "their own guides, can see guides that are not published.",
)
async def list_guides(
    response: Response,
    params: PageDep,
    session: SessionDep,
    user: OptionalUser,
    search: Optional[str] = None,
    status_filter: Optional[GuideStatus] = Query(default=None, alias="status"),
    author_id: Optional[int] = None,
    arc_id: Optional[int] = None,
    tag_id: Optional[int] = None,
    character_id: Optional[int] = None,
    gamble_id: Optional[int] = None,
    sort: Literal["created_at", "like_count", "view_count", "title"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
) -> Page[GuideRead]:
    """
    List guides.

    - **status**: Honoured for moderators and for authors listing their own guides;
      everyone else only sees published guides.
    - **sort**: created_at (default), like_count, view_count or title.
    """
    own_guides = user is not None and author_id == user.id
    if user is not None and (user.is_moderator or own_guides):
        effective_status = status_filter
    else:
        effective_status = GuideStatus.published

    repository = GuideRepository(session)
    guides, total = await repository.search(
        query=search,
        status=effective_status,
        author_id=author_id,
        arc_id=arc_id,
        tag_id=tag_id,
        character_id=character_id,
        gamble_id=gamble_id,
        sort=sort,
        order=order,
        limit=params.limit,
        offset=params.offset,
    )
    return paginate(response, await guide_reads(repository, guides), total, params)


@router.get(
    "/{guide_id}",
    response_model=GuideRead,
    summary="Get Guide",
    description="Retrieve a guide. Viewing a published guide increments its view count.",
    responses={404: {"description": "Guide not found or not visible"}},
)
async def get_guide(guide_id: int, session: SessionDep, user: OptionalUser) -> GuideRead:
    repository = GuideRepository(session)
    guide = await get_or_404(repository, guide_id, "Guide")
    if guide.status == GuideStatus.published:
        guide = await repository.increment_views(guide)
    elif not _can_manage(guide, user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guide not found")
    return await _read(repository, guide)


@router.post(
    "",
    response_model=GuideRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Guide",
    description="Submit a guide for moderation.",
    responses={
        201: {"description": "Guide submitted"},
        404: {"description": "Linked arc, tag, character or gamble not found"},
    },
)
async def create_guide(payload: GuideCreate, session: SessionDep, user: CurrentUser) -> GuideRead:
    await _check_links(session, payload)
    repository = GuideRepository(session)
    guide = await repository.create(
        Guide(**payload.model_dump(exclude=_LINK_FIELDS), author_id=user.id, status=GuideStatus.pending)
    )
    await _replace_links(repository, guide.id, payload)
    logger.info(f"Guide {guide.id} submitted by user {user.id}", extra={"guide_id": guide.id})
    return await _read(repository, guide)


@router.put(
    "/{guide_id}",
    response_model=GuideRead,
    summary="Update Guide",
    description="Edit a guide. Authors editing a published or rejected guide send it back to moderation.",
    responses={
        403: {"description": "Not the author or a moderator"},
        404: {"description": "Guide or linked entity not found"},
    },
)
async def update_guide(guide_id: int, payload: GuideUpdate, session: SessionDep, user: CurrentUser) -> GuideRead:
    repository = GuideRepository(session)
    guide = await get_or_404(repository, guide_id, "Guide")
    if not _can_manage(guide, user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only edit your own guides")
    await _check_links(session, payload)

    changes = payload.model_dump(exclude_unset=True, exclude=_LINK_FIELDS)
    if not user.is_moderator and guide.status in (GuideStatus.published, GuideStatus.rejected):
        changes["status"] = GuideStatus.pending
        changes["rejection_reason"] = None
    guide = await repository.apply_changes(guide, changes)
    await _replace_links(repository, guide.id, payload)
    return await _read(repository, guide)


@router.delete(
    "/{guide_id}",
    response_model=MessageResponse,
    summary="Delete Guide",
    responses={
        403: {"description": "Not the author or a moderator"},
        404: {"description": "Guide not found"},
    },
)
async def delete_guide(guide_id: int, session: SessionDep, user: CurrentUser) -> MessageResponse:
    repository = GuideRepository(session)
    guide = await get_or_404(repository, guide_id, "Guide")
    if not _can_manage(guide, user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only delete your own guides")
    await repository.delete(guide_id)
    return MessageResponse(message="Guide deleted")


@router.post(
    "/{guide_id}/like",
    response_model=GuideLikeResult,
    summary="Toggle Like",
    description="Like a published guide, or remove an existing like.",
    responses={404: {"description": "Guide not found"}},
)
async def toggle_guide_like(guide_id: int, session: SessionDep, user: CurrentUser) -> GuideLikeResult:
    repository = GuideRepository(session)
    guide = await get_or_404(repository, guide_id, "Guide")
    if guide.status != GuideStatus.published:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guide not found")
    liked, like_count = await repository.toggle_like(guide, user.id)
    return GuideLikeResult(liked=liked, like_count=like_count)


# =====================================================================
# Moderation
# =====================================================================


@router.post(
    "/{guide_id}/approve",
    response_model=GuideRead,
    summary="Approve Guide",
    description="Publish a guide.",
    responses={404: {"description": "Guide not found"}},
)
async def approve_guide(guide_id: int, session: SessionDep, moderator: ModeratorUser) -> GuideRead:
    repository = GuideRepository(session)
    guide = await get_or_404(repository, guide_id, "Guide")
    guide = await repository.apply_changes(guide, {"status": GuideStatus.published, "rejection_reason": None})
    log_moderation_action("approve", "guide", guide.id, moderator.id)
    return await _read(repository, guide)


@router.post(
    "/{guide_id}/reject",
    response_model=GuideRead,
    summary="Reject Guide",
    description="Reject a guide with a reason shown to its author.",
    responses={404: {"description": "Guide not found"}},
)
async def reject_guide(
    guide_id: int, payload: GuideReject, session: SessionDep, moderator: ModeratorUser
) -> GuideRead:
    repository = GuideRepository(session)
    guide = await get_or_404(repository, guide_id, "Guide")
    guide = await repository.apply_changes(guide, {"status": GuideStatus.rejected, "rejection_reason": payload.reason})
    log_moderation_action("reject", "guide", guide.id, moderator.id, reason=payload.reason)
    return await _read(repository, guide)
