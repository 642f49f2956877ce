"""
Chapter Endpoints.

Chapter listings are spoiler-gated on the chapter number itself, so readers
only see chapters they have reached.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.chapters import Chapter
from usogui_db.core.database.repositories.catalogue import ChapterRepository, VolumeRepository
from usogui_db.core.models.domain import Language, TranslatableEntity
from usogui_db.core.models.io.catalogue import ChapterCreate, ChapterRead, ChapterUpdate
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.server.services.content import get_or_404
from usogui_db.server.services.deps import ModeratorUser, ProgressDep, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate
from usogui_db.server.services.translations import TranslationService

router = APIRouter()


@router.get(
    "",
    response_model=Page[ChapterRead],
    summary="List Chapters",
    description="List chapters in order, filtered by volume and a title/summary/number search. Spoiler-gated.",
)
async def list_chapters(
    response: Response,
    params: PageDep,
    session: SessionDep,
    progress: ProgressDep,
    volume_id: Optional[int] = None,
    search: Optional[str] = None,
    lang: Optional[Language] = None,
) -> Page[ChapterRead]:
    items, total = await ChapterRepository(session).search(
        query=search, volume_id=volume_id, progress=progress, limit=params.limit, offset=params.offset
    )
    page = paginate(response, items, total, params, ChapterRead.model_validate)
    page.data = await TranslationService(session).localize_many(TranslatableEntity.chapter, page.data, lang)
    return page


@router.get(
    "/by-number/{number}",
    response_model=ChapterRead,
    summary="Get Chapter by Number",
    responses={404: {"description": "Chapter not found"}},
)
async def get_chapter_by_number(number: int, session: SessionDep, lang: Optional[Language] = None) -> ChapterRead:
    chapter = await ChapterRepository(session).get_by_number(number)
    if chapter is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Chapter {number} not found")
    return await TranslationService(session).localize(
        TranslatableEntity.chapter, ChapterRead.model_validate(chapter), lang
    )


@router.get(
    "/{chapter_id}",
    response_model=ChapterRead,
    summary="Get Chapter",
    responses={404: {"description": "Chapter not found"}},
)
async def get_chapter(chapter_id: int, session: SessionDep, lang: Optional[Language] = None) -> ChapterRead:
    chapter = await get_or_404(ChapterRepository(session), chapter_id, "Chapter")
    return await TranslationService(session).localize(
        TranslatableEntity.chapter, ChapterRead.model_validate(chapter), lang
    )


async def _check_volume(session, volume_id: Optional[int]) -> None:
    if volume_id is not None and not await VolumeRepository(session).exists(volume_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Volume not found")


@router.post(
    "",
    response_model=ChapterRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Chapter",
    responses={
        201: {"description": "Chapter created"},
        404: {"description": "Volume not found"},
        409: {"description": "Chapter number already exists"},
    },
)
async def create_chapter(payload: ChapterCreate, session: SessionDep, moderator: ModeratorUser) -> ChapterRead:
    repository = ChapterRepository(session)
    await _check_volume(session, payload.volume_id)
    if await repository.get_by_number(payload.number):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Chapter {payload.number} already exists")
    chapter = await repository.create(Chapter.model_validate(payload))
    return ChapterRead.model_validate(chapter)


@router.put(
    "/{chapter_id}",
    response_model=ChapterRead,
    summary="Update Chapter",
    responses={404: {"description": "Chapter or volume not found"}},
)
async def update_chapter(
    chapter_id: int, payload: ChapterUpdate, session: SessionDep, moderator: ModeratorUser
) -> ChapterRead:
    repository = ChapterRepository(session)
    chapter = await get_or_404(repository, chapter_id, "Chapter")
    changes = payload.model_dump(exclude_unset=True)
    await _check_volume(session, changes.get("volume_id"))
    chapter = await repository.apply_changes(chapter, changes)
    return ChapterRead.model_validate(chapter)


@router.delete(
    "/{chapter_id}",
    response_model=MessageResponse,
    summary="Delete Chapter",
    responses={404: {"description": "Chapter not found"}},
)
async def delete_chapter(chapter_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    if not await ChapterRepository(session).delete(chapter_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chapter not found")
    return MessageResponse(message="Chapter deleted")
