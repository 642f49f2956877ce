"""
Translation Endpoints.

Read and manage per-language text for chapters, characters, events, arcs,
factions, tags, gambles and series. Listing endpoints of those resources
apply translations through their ``lang`` query parameter.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, status

from usogui_db.core.models.domain import Language, TranslatableEntity
from usogui_db.core.models.io.common import MessageResponse
from usogui_db.core.models.io.translations import (
    TranslationCreate,
    TranslationRead,
    TranslationStats,
    TranslationUpdate,
)
from usogui_db.server.services.deps import ModeratorUser, SessionDep
from usogui_db.server.services.translations import (
    DuplicateTranslationError,
    InvalidTranslationFieldError,
    ParentNotFoundError,
    TranslationService,
)

router = APIRouter()


@router.get(
    "/stats",
    response_model=TranslationStats,
    summary="Translation Coverage",
    description="Count translated entities per language, overall and per entity type.",
)
async def translation_stats(session: SessionDep) -> TranslationStats:
    return await TranslationService(session).stats()


@router.get(
    "/{entity_type}/{entity_id}",
    response_model=List[TranslationRead],
    summary="List Translations",
    description="All translations of one entity.",
)
async def list_translations(
    entity_type: TranslatableEntity, entity_id: int, session: SessionDep
) -> List[TranslationRead]:
    return await TranslationService(session).list_for_entity(entity_type, entity_id)


@router.get(
    "/{entity_type}/{entity_id}/{language}",
    response_model=TranslationRead,
    summary="Get Translation",
    responses={404: {"description": "No translation in this language"}},
)
async def get_translation(
    entity_type: TranslatableEntity, entity_id: int, language: Language, session: SessionDep
) -> TranslationRead:
    translation = await TranslationService(session).get(entity_type, entity_id, language)
    if translation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Translation not found")
    return translation


@router.post(
    "/{entity_type}",
    response_model=TranslationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Translation",
    description="Add a translation for an entity. Only the entity's translatable fields are accepted.",
    responses={
        201: {"description": "Translation created"},
        400: {"description": "Field is not translatable or its value is too long"},
        404: {"description": "Entity not found"},
        409: {"description": "The entity already has a translation in this language"},
    },
)
async def create_translation(
    entity_type: TranslatableEntity, payload: TranslationCreate, session: SessionDep, moderator: ModeratorUser
) -> TranslationRead:
    """
    Create a translation.

    - **entity_id**: The translated entity.
    - **language**: Target language.
    - **translated**: Field name to translated text, e.g. ``{"name": "..."}``.
    """
    try:
        return await TranslationService(session).create(entity_type, payload)
    except InvalidTranslationFieldError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except ParentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DuplicateTranslationError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.put(
    "/{entity_type}/{translation_id}",
    response_model=TranslationRead,
    summary="Update Translation",
    responses={
        400: {"description": "Field is not translatable or its value is too long"},
        404: {"description": "Translation not found"},
    },
)
async def update_translation(
    entity_type: TranslatableEntity,
    translation_id: int,
    payload: TranslationUpdate,
    session: SessionDep,
    moderator: ModeratorUser,
) -> TranslationRead:
    try:
        translation = await TranslationService(session).update(entity_type, translation_id, payload)
    except InvalidTranslationFieldError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    if translation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Translation not found")
    return translation


@router.delete(
    "/{entity_type}/{translation_id}",
    response_model=MessageResponse,
    summary="Delete Translation",
    responses={404: {"description": "Translation not found"}},
)
async def delete_translation(
    entity_type: TranslatableEntity, translation_id: int, session: SessionDep, moderator: ModeratorUser
) -> MessageResponse:
    if not await TranslationService(session).delete(entity_type, translation_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Translation not found")
    return MessageResponse(message="Translation deleted")
