"""
Media Endpoints.

Community-submitted links to external artwork, videos and audio. Submitted
URLs are validated for their media type and normalized before the duplicate
check; submissions wait for moderation unless a moderator submits them.
"""

from __future__ import annotations

from typing import Annotated, Dict, Literal, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from usogui_db.core.database.entities.media import Media
from usogui_db.core.database.entities.users import User
from usogui_db.core.database.repositories import (
    ArcRepository,
    CharacterRepository,
    EventRepository,
    FactionRepository,
    GambleRepository,
    GuideRepository,
    MediaRepository,
    UserRepository,
    VolumeRepository,
)
from usogui_db.core.database.repositories.base import SQLModelRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import MediaOwnerType, MediaPurpose, MediaStatus, MediaType
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.media import (
    MediaCreate,
    MediaRead,
    MediaReject,
    MediaResolution,
    MediaResolveRequest,
    MediaUpdate,
)
from usogui_db.core.monitoring import log_moderation_action
from usogui_db.server.services.content import get_or_404
from usogui_db.server.services.deps import CurrentUser, ModeratorUser, OptionalUser, ProgressDep, SessionDep
from usogui_db.server.services.media_resolver import MediaUrlResolver, get_media_resolver
from usogui_db.server.services.media_urls import MediaUrlError, normalize_media_url, validate_media_url
from usogui_db.server.services.pagination import PageDep, paginate

logger = get_logger(__name__)

router = APIRouter()

ResolverDep = Annotated[MediaUrlResolver, Depends(get_media_resolver)]

OWNER_REPOSITORIES: Dict[MediaOwnerType, Type[SQLModelRepository]] = {
    MediaOwnerType.character: CharacterRepository,
    MediaOwnerType.arc: ArcRepository,
    MediaOwnerType.event: EventRepository,
    MediaOwnerType.gamble: GambleRepository,
    MediaOwnerType.faction: FactionRepository,
    MediaOwnerType.volume: VolumeRepository,
    MediaOwnerType.user: UserRepository,
    MediaOwnerType.guide: GuideRepository,
}


def _can_manage(media: Media, user: Optional[User]) -> bool:
    return user is not None and (user.is_moderator or media.submitted_by_id == user.id)


def _require_pending(media: Media) -> None:
    if media.status != MediaStatus.pending:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="This submission is not in pending state"
        )


@router.get(
    "",
    response_model=Page[MediaRead],
    summary="List Media",
    description="List media, newest first. Defaults to approved media; moderators may pass another status "
    "or `all`. Media depicting chapters past the reader's progress is hidden.",
)
async def list_media(
    response: Response,
    params: PageDep,
    session: SessionDep,
    progress: ProgressDep,
    user: OptionalUser,
    status_filter: Literal["pending", "approved", "rejected", "all"] = Query(default="approved", alias="status"),
    type: Optional[MediaType] = None,
    owner_type: Optional[MediaOwnerType] = None,
    owner_id: Optional[int] = None,
    purpose: Optional[MediaPurpose] = None,
) -> Page[MediaRead]:
    if user is None or not user.is_moderator:
        status_filter = "approved"
    items, total = await MediaRepository(session).search(
        status=None if status_filter == "all" else MediaStatus(status_filter),
        type=type,
        owner_type=owner_type,
        owner_id=owner_id,
        purpose=purpose,
        progress=progress,
        limit=params.limit,
        offset=params.offset,
    )
    return paginate(response, items, total, params, MediaRead.model_validate)


@router.get(
    "/thumbnail/{owner_type}/{owner_id}",
    response_model=MediaRead,
    summary="Entity Thumbnail",
    description="Pick the display image of an entity: the approved display media with the highest chapter "
    "within the reader's progress, otherwise the newest display media.",
    responses={404: {"description": "No display media for this entity"}},
)
async def get_thumbnail(
    owner_type: MediaOwnerType, owner_id: int, session: SessionDep, progress: ProgressDep
) -> MediaRead:
    media = await MediaRepository(session).find_thumbnail(owner_type, owner_id, progress)
    if media is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No thumbnail found")
    return MediaRead.model_validate(media)


@router.post(
    "/resolve",
    response_model=MediaResolution,
    summary="Resolve Media URL",
    description="Look up display metadata (direct image, thumbnail, title, author) for an external URL. "
    "Best effort: unsupported or unreachable URLs return only the platform.",
)
async def resolve_media_url(payload: MediaResolveRequest, resolver: ResolverDep) -> MediaResolution:
    return await resolver.resolve(payload.url.strip())


@router.get(
    "/{media_id}",
    response_model=MediaRead,
    summary="Get Media",
    description="Retrieve media. Unapproved media is only visible to its submitter and moderators.",
    responses={404: {"description": "Media not found"}},
)
async def get_media(media_id: int, session: SessionDep, user: OptionalUser) -> MediaRead:
    media = await get_or_404(MediaRepository(session), media_id, "Media")
    if media.status != MediaStatus.approved and not _can_manage(media, user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Media not found")
    return MediaRead.model_validate(media)


@router.post(
    "",
    response_model=MediaRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Media",
    description="Submit a media link for an entity. The URL must suit the media type; it is normalized before "
    "the duplicate check. Moderator submissions are approved immediately.",
    responses={
        201: {"description": "Media submitted"},
        400: {"description": "URL not acceptable for this media type"},
        404: {"description": "Owner entity not found"},
        409: {"description": "This URL was already submitted"},
    },
)
async def submit_media(payload: MediaCreate, session: SessionDep, user: CurrentUser) -> MediaRead:
    """
    Submit media.

    - **url**: YouTube for videos; DeviantArt, Pixiv, Twitter/X, Instagram or a direct image file for images.
    - **owner_type** / **owner_id**: The entity the media belongs to.
    - **purpose**: `gallery` or `entity_display` (candidate thumbnail).
    """
    try:
        validate_media_url(payload.url, payload.type)
    except MediaUrlError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    url = normalize_media_url(payload.url, payload.type)

    repository = MediaRepository(session)
    if await repository.get_by_url(url):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="This media URL has already been submitted")
    owner_repository = OWNER_REPOSITORIES[payload.owner_type](session)
    if not await owner_repository.exists(payload.owner_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{payload.owner_type.value.capitalize()} {payload.owner_id} not found",
        )

    media = await repository.create(
        Media(
            **payload.model_dump(exclude={"url"}),
            url=url,
            status=MediaStatus.approved if user.is_moderator else MediaStatus.pending,
            submitted_by_id=user.id,
        )
    )
    logger.info(
        f"Media {media.id} submitted by user {user.id} ({media.status.value})",
        extra={"media_id": media.id, "owner_type": media.owner_type.value, "owner_id": media.owner_id},
    )
    return MediaRead.model_validate(media)


@router.patch(
    "/{media_id}",
    response_model=MediaRead,
    summary="Update Media",
    responses={
        403: {"description": "Not the submitter or a moderator"},
        404: {"description": "Media not found"},
    },
)
async def update_media(media_id: int, payload: MediaUpdate, session: SessionDep, user: CurrentUser) -> MediaRead:
    repository = MediaRepository(session)
    media = await get_or_404(repository, media_id, "Media")
    if not _can_manage(media, user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only edit your own submissions")
    media = await repository.apply_changes(media, payload.model_dump(exclude_unset=True))
    return MediaRead.model_validate(media)


@router.post(
    "/{media_id}/approve",
    response_model=MediaRead,
    summary="Approve Media",
    responses={
        400: {"description": "Submission is not pending"},
        404: {"description": "Media not found"},
    },
)
async def approve_media(media_id: int, session: SessionDep, moderator: ModeratorUser) -> MediaRead:
    repository = MediaRepository(session)
    media = await get_or_404(repository, media_id, "Media")
    _require_pending(media)
    media = await repository.apply_changes(media, {"status": MediaStatus.approved, "rejection_reason": None})
    log_moderation_action("approve", "media", media.id, moderator.id)
    return MediaRead.model_validate(media)


@router.post(
    "/{media_id}/reject",
    response_model=MediaRead,
    summary="Reject Media",
    responses={
        400: {"description": "Submission is not pending"},
        404: {"description": "Media not found"},
    },
)
async def reject_media(
    media_id: int, payload: MediaReject, session: SessionDep, moderator: ModeratorUser
) -> MediaRead:
    repository = MediaRepository(session)
    media = await get_or_404(repository, media_id, "Media")
    _require_pending(media)
    media = await repository.apply_changes(media, {"status": MediaStatus.rejected, "rejection_reason": payload.reason})
    log_moderation_action("reject", "media", media.id, moderator.id, reason=payload.reason)
    return MediaRead.model_validate(media)


@router.delete(
    "/{media_id}",
    response_model=MessageResponse,
    summary="Delete Media",
    responses={
        403: {"description": "Not the submitter or a moderator"},
        404: {"description": "Media not found"},
    },
)
async def delete_media(media_id: int, session: SessionDep, user: CurrentUser) -> MessageResponse:
    repository = MediaRepository(session)
    media = await get_or_404(repository, media_id, "Media")
    if not _can_manage(media, user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only delete your own submissions")
    await repository.delete(media_id)
    return MessageResponse(message="Media deleted")
