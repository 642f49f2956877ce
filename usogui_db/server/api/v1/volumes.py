"""
Volume Endpoints.

Volumes group a contiguous chapter range. ``/by-chapter/{n}`` finds the
volume that contains a chapter.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.volumes import Volume
from usogui_db.core.database.repositories.catalogue import VolumeRepository
from usogui_db.core.models.io.catalogue import VolumeCreate, VolumeRead, VolumeUpdate
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.server.services.content import check_chapter_range, get_or_404
from usogui_db.server.services.deps import ModeratorUser, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate

router = APIRouter()


@router.get("", response_model=Page[VolumeRead], summary="List Volumes", description="List volumes by number.")
async def list_volumes(response: Response, params: PageDep, session: SessionDep) -> Page[VolumeRead]:
    repository = VolumeRepository(session)
    items = await repository.list(limit=params.limit, offset=params.offset)
    total = await repository.count()
    return paginate(response, items, total, params, VolumeRead.model_validate)


@router.get(
    "/by-chapter/{chapter_number}",
    response_model=VolumeRead,
    summary="Find Volume by Chapter",
    description="Return the volume whose chapter range contains the given chapter number.",
    responses={404: {"description": "No volume contains this chapter"}},
)
async def get_volume_by_chapter(chapter_number: int, session: SessionDep) -> VolumeRead:
    volume = await VolumeRepository(session).find_containing_chapter(chapter_number)
    if volume is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"No volume contains chapter {chapter_number}"
        )
    return VolumeRead.model_validate(volume)


@router.get(
    "/{volume_id}",
    response_model=VolumeRead,
    summary="Get Volume",
    responses={404: {"description": "Volume not found"}},
)
async def get_volume(volume_id: int, session: SessionDep) -> VolumeRead:
    return VolumeRead.model_validate(await get_or_404(VolumeRepository(session), volume_id, "Volume"))


@router.post(
    "",
    response_model=VolumeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Volume",
    responses={
        201: {"description": "Volume created"},
        400: {"description": "End chapter before start chapter"},
        409: {"description": "Volume number already exists"},
    },
)
async def create_volume(payload: VolumeCreate, session: SessionDep, moderator: ModeratorUser) -> VolumeRead:
    check_chapter_range(payload.start_chapter, payload.end_chapter)
    repository = VolumeRepository(session)
    if await repository.get_by_number(payload.number):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Volume {payload.number} already exists")
    volume = await repository.create(Volume.model_validate(payload))
    return VolumeRead.model_validate(volume)


@router.put(
    "/{volume_id}",
    response_model=VolumeRead,
    summary="Update Volume",
    responses={
        400: {"description": "End chapter before start chapter"},
        404: {"description": "Volume not found"},
    },
)
async def update_volume(
    volume_id: int, payload: VolumeUpdate, session: SessionDep, moderator: ModeratorUser
) -> VolumeRead:
    repository = VolumeRepository(session)
    volume = await get_or_404(repository, volume_id, "Volume")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    check_chapter_range(
        changes.get("start_chapter", volume.start_chapter), changes.get("end_chapter", volume.end_chapter)
    )
    volume = await repository.apply_changes(volume, changes)
    return VolumeRead.model_validate(volume)


@router.delete(
    "/{volume_id}",
    response_model=MessageResponse,
    summary="Delete Volume",
    responses={404: {"description": "Volume not found"}},
)
async def delete_volume(volume_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    if not await VolumeRepository(session).delete(volume_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Volume not found")
    return MessageResponse(message="Volume deleted")
