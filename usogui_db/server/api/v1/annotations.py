"""
Annotation Endpoints.

Readers attach notes to characters, gambles and arcs. New annotations wait
for moderation; until approved they are only visible to their author and
moderators. Regular authors may edit their pending or rejected annotations,
and editing a rejected one submits it again.
"""

from __future__ import annotations

from typing import Dict, Literal, Optional, Type

from fastapi import APIRouter, HTTPException, Query, Response, status

from usogui_db.core.database.entities.annotations import Annotation
from usogui_db.core.database.entities.users import User
from usogui_db.core.database.repositories import (
    AnnotationRepository,
    ArcRepository,
    CharacterRepository,
    GambleRepository,
)
from usogui_db.core.database.repositories.base import SQLModelRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import AnnotationOwnerType, AnnotationStatus
from usogui_db.core.models.io.annotations import (
    AnnotationCreate,
    AnnotationRead,
    AnnotationReject,
    AnnotationUpdate,
    PendingCount,
)
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.monitoring import log_moderation_action
from usogui_db.server.services.content import get_or_404
from usogui_db.server.services.deps import CurrentUser, ModeratorUser, OptionalUser, ProgressDep, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate

logger = get_logger(__name__)

router = APIRouter()

OWNER_REPOSITORIES: Dict[AnnotationOwnerType, Type[SQLModelRepository]] = {
    AnnotationOwnerType.character: CharacterRepository,
    AnnotationOwnerType.gamble: GambleRepository,
    AnnotationOwnerType.arc: ArcRepository,
}

SPOILER_CHAPTER_REQUIRED = "spoiler_chapter is required when is_spoiler is true"


def _is_author(annotation: Annotation, user: Optional[User]) -> bool:
    return user is not None and annotation.author_id == user.id


def _can_manage(annotation: Annotation, user: Optional[User]) -> bool:
    return user is not None and (user.is_moderator or _is_author(annotation, user))


async def _visible_or_404(repository: AnnotationRepository, annotation_id: int, user: Optional[User]) -> Annotation:
    annotation = await get_or_404(repository, annotation_id, "Annotation")
    if annotation.status != AnnotationStatus.approved and not _can_manage(annotation, user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Annotation not found")
    return annotation


def _require_pending(annotation: Annotation, action: str) -> None:
    if annotation.status != AnnotationStatus.pending:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Only pending annotations can be {action}"
        )


@router.get(
    "",
    response_model=Page[AnnotationRead],
    summary="List Annotations",
    description="List annotations, newest first. Defaults to approved annotations; moderators may pass another "
    "status or `all`. Spoiler annotations past the reader's progress are hidden.",
)
async def list_annotations(
    response: Response,
    params: PageDep,
    session: SessionDep,
    progress: ProgressDep,
    user: OptionalUser,
    status_filter: Literal["pending", "approved", "rejected", "all"] = Query(default="approved", alias="status"),
    owner_type: Optional[AnnotationOwnerType] = None,
    owner_id: Optional[int] = None,
    author_id: Optional[int] = None,
    chapter_reference: Optional[int] = Query(default=None, ge=1),
) -> Page[AnnotationRead]:
    if user is None or not user.is_moderator:
        status_filter = "approved"
    items, total = await AnnotationRepository(session).search(
        status=None if status_filter == "all" else AnnotationStatus(status_filter),
        owner_type=owner_type,
        owner_id=owner_id,
        author_id=author_id,
        chapter_reference=chapter_reference,
        progress=progress,
        limit=params.limit,
        offset=params.offset,
    )
    return paginate(response, items, total, params, AnnotationRead.model_validate)


@router.get(
    "/pending",
    response_model=Page[AnnotationRead],
    summary="Moderation Queue",
    description="Pending annotations, oldest first.",
)
async def list_pending_annotations(
    response: Response, params: PageDep, session: SessionDep, moderator: ModeratorUser
) -> Page[AnnotationRead]:
    items, total = await AnnotationRepository(session).search(
        status=AnnotationStatus.pending, oldest_first=True, limit=params.limit, offset=params.offset
    )
    return paginate(response, items, total, params, AnnotationRead.model_validate)


@router.get("/pending/count", response_model=PendingCount, summary="Pending Annotation Count")
async def count_pending_annotations(session: SessionDep, moderator: ModeratorUser) -> PendingCount:
    return PendingCount(count=await AnnotationRepository(session).count_pending())


@router.get(
    "/mine",
    response_model=Page[AnnotationRead],
    summary="My Annotations",
    description="The caller's own annotations in every status, newest first.",
)
async def list_my_annotations(
    response: Response, params: PageDep, session: SessionDep, user: CurrentUser
) -> Page[AnnotationRead]:
    items, total = await AnnotationRepository(session).search(
        author_id=user.id, limit=params.limit, offset=params.offset
    )
    return paginate(response, items, total, params, AnnotationRead.model_validate)


@router.get(
    "/{annotation_id}",
    response_model=AnnotationRead,
    summary="Get Annotation",
    description="Unapproved annotations are only visible to their author and moderators.",
    responses={404: {"description": "Annotation not found"}},
)
async def get_annotation(annotation_id: int, session: SessionDep, user: OptionalUser) -> AnnotationRead:
    annotation = await _visible_or_404(AnnotationRepository(session), annotation_id, user)
    return AnnotationRead.model_validate(annotation)


@router.post(
    "",
    response_model=AnnotationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Annotation",
    responses={
        201: {"description": "Annotation submitted for moderation"},
        400: {"description": "Spoiler annotation without a spoiler chapter"},
        404: {"description": "Annotated entity not found"},
    },
)
async def submit_annotation(payload: AnnotationCreate, session: SessionDep, user: CurrentUser) -> AnnotationRead:
    """
    Submit an annotation.

    - **owner_type** / **owner_id**: The character, gamble or arc being annotated.
    - **chapter_reference**: Chapter the annotation cites.
    - **is_spoiler** / **spoiler_chapter**: Spoiler annotations must name the chapter they spoil.
    """
    if payload.is_spoiler and payload.spoiler_chapter is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SPOILER_CHAPTER_REQUIRED)
    owner_repository = OWNER_REPOSITORIES[payload.owner_type](session)
    if not await owner_repository.exists(payload.owner_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{payload.owner_type.value.capitalize()} {payload.owner_id} not found",
        )

    fields = payload.model_dump()
    if not payload.is_spoiler:
        fields["spoiler_chapter"] = None
    annotation = await AnnotationRepository(session).create(
        Annotation(**fields, status=AnnotationStatus.pending, author_id=user.id)
    )
    logger.info(
        f"Annotation {annotation.id} submitted by user {user.id}",
        extra={
            "annotation_id": annotation.id,
            "owner_type": annotation.owner_type.value,
            "owner_id": annotation.owner_id,
        },
    )
    return AnnotationRead.model_validate(annotation)


@router.patch(
    "/{annotation_id}",
    response_model=AnnotationRead,
    summary="Update Annotation",
    description="Authors may edit their pending or rejected annotations; editing a rejected annotation sends it "
    "back to moderation. Moderators may edit any annotation.",
    responses={
        400: {"description": "Spoiler annotation without a spoiler chapter"},
        403: {"description": "Not the author, or the annotation is already approved"},
        404: {"description": "Annotation not found"},
    },
)
async def update_annotation(
    annotation_id: int, payload: AnnotationUpdate, session: SessionDep, user: CurrentUser
) -> AnnotationRead:
    repository = AnnotationRepository(session)
    annotation = await _visible_or_404(repository, annotation_id, user)
    if not _can_manage(annotation, user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only edit your own annotations")
    if annotation.status == AnnotationStatus.approved and not user.is_moderator:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Approved annotations cannot be edited")

    changes = payload.model_dump(exclude_unset=True)
    is_spoiler = changes.pop("is_spoiler", None)
    spoiler_chapter = changes.pop("spoiler_chapter", None)
    if is_spoiler is not None:
        spoiler_chapter = spoiler_chapter or annotation.spoiler_chapter
        if is_spoiler and spoiler_chapter is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SPOILER_CHAPTER_REQUIRED)
        changes["is_spoiler"] = is_spoiler
        changes["spoiler_chapter"] = spoiler_chapter if is_spoiler else None
    elif spoiler_chapter is not None:
        changes["spoiler_chapter"] = spoiler_chapter
    for required in ("title", "content"):
        if required in changes and changes[required] is None:
            del changes[required]

    if annotation.status == AnnotationStatus.rejected and _is_author(annotation, user) and not user.is_moderator:
        changes.update(status=AnnotationStatus.pending, rejection_reason=None)
        logger.info(f"Annotation {annotation.id} resubmitted by user {user.id}")

    annotation = await repository.apply_changes(annotation, changes)
    return AnnotationRead.model_validate(annotation)


@router.post(
    "/{annotation_id}/approve",
    response_model=AnnotationRead,
    summary="Approve Annotation",
    responses={
        400: {"description": "Annotation is not pending"},
        404: {"description": "Annotation not found"},
    },
)
async def approve_annotation(annotation_id: int, session: SessionDep, moderator: ModeratorUser) -> AnnotationRead:
    repository = AnnotationRepository(session)
    annotation = await get_or_404(repository, annotation_id, "Annotation")
    _require_pending(annotation, "approved")
    annotation = await repository.apply_changes(
        annotation, {"status": AnnotationStatus.approved, "rejection_reason": None}
    )
    log_moderation_action("approve", "annotation", annotation.id, moderator.id)
    return AnnotationRead.model_validate(annotation)


@router.post(
    "/{annotation_id}/reject",
    response_model=AnnotationRead,
    summary="Reject Annotation",
    responses={
        400: {"description": "Annotation is not pending"},
        404: {"description": "Annotation not found"},
    },
)
async def reject_annotation(
    annotation_id: int, payload: AnnotationReject, session: SessionDep, moderator: ModeratorUser
) -> AnnotationRead:
    repository = AnnotationRepository(session)
    annotation = await get_or_404(repository, annotation_id, "Annotation")
    _require_pending(annotation, "rejected")
    annotation = await repository.apply_changes(
        annotation, {"status": AnnotationStatus.rejected, "rejection_reason": payload.reason}
    )
    log_moderation_action("reject", "annotation", annotation.id, moderator.id, reason=payload.reason)
    return AnnotationRead.model_validate(annotation)


@router.delete(
    "/{annotation_id}",
    response_model=MessageResponse,
    summary="Delete Annotation",
    responses={
        403: {"description": "Not the author or a moderator"},
        404: {"description": "Annotation not found"},
    },
)
async def delete_annotation(annotation_id: int, session: SessionDep, user: CurrentUser) -> MessageResponse:
    repository = AnnotationRepository(session)
    annotation = await _visible_or_404(repository, annotation_id, user)
    if not _can_manage(annotation, user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only delete your own annotations")
    await repository.delete(annotation_id)
    return MessageResponse(message="Annotation deleted")
