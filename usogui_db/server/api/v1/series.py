"""
Series Endpoints.

Public listing and lookup of series; mutations require a moderator.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.series import Series
from usogui_db.core.database.repositories.catalogue import SeriesRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import Language, TranslatableEntity
from usogui_db.core.models.io.catalogue import SeriesCreate, SeriesRead, SeriesUpdate
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.server.services.content import get_or_404
from usogui_db.server.services.deps import ModeratorUser, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate
from usogui_db.server.services.translations import TranslationService

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=Page[SeriesRead],
    summary="List Series",
    description="List series in reading order, optionally filtered by name.",
)
async def list_series(
    response: Response,
    params: PageDep,
    session: SessionDep,
    name: Optional[str] = None,
    lang: Optional[Language] = None,
) -> Page[SeriesRead]:
    items, total = await SeriesRepository(session).search(query=name, limit=params.limit, offset=params.offset)
    page = paginate(response, items, total, params, SeriesRead.model_validate)
    page.data = await TranslationService(session).localize_many(TranslatableEntity.series, page.data, lang)
    return page


@router.get(
    "/{series_id}",
    response_model=SeriesRead,
    summary="Get Series",
    responses={404: {"description": "Series not found"}},
)
async def get_series(series_id: int, session: SessionDep, lang: Optional[Language] = None) -> SeriesRead:
    series = await get_or_404(SeriesRepository(session), series_id, "Series")
    return await TranslationService(session).localize(
        TranslatableEntity.series, SeriesRead.model_validate(series), lang
    )


@router.post(
    "",
    response_model=SeriesRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Series",
    responses={
        201: {"description": "Series created"},
        409: {"description": "A series with this name exists"},
    },
)
async def create_series(payload: SeriesCreate, session: SessionDep, moderator: ModeratorUser) -> SeriesRead:
    series = await SeriesRepository(session).create(Series.model_validate(payload))
    logger.info(f"Series {series.id} created by user {moderator.id}")
    return SeriesRead.model_validate(series)


@router.put(
    "/{series_id}",
    response_model=SeriesRead,
    summary="Update Series",
    responses={404: {"description": "Series not found"}},
)
async def update_series(
    series_id: int, payload: SeriesUpdate, session: SessionDep, moderator: ModeratorUser
) -> SeriesRead:
    repository = SeriesRepository(session)
    series = await get_or_404(repository, series_id, "Series")
    series = await repository.apply_changes(series, payload.model_dump(exclude_unset=True))
    return SeriesRead.model_validate(series)


@router.delete(
    "/{series_id}",
    response_model=MessageResponse,
    summary="Delete Series",
    responses={404: {"description": "Series not found"}},
)
async def delete_series(series_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    if not await SeriesRepository(session).delete(series_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Series not found")
    return MessageResponse(message="Series deleted")
