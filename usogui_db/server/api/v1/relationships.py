"""
Character Relationship Endpoints.

Moderators create, edit and remove directed relationships between
characters; creating one may also create the reverse row. Readers see
relationships through ``/characters/{id}/relationships``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.relationships import CharacterRelationship
from usogui_db.core.database.repositories.characters import CharacterRepository
from usogui_db.core.database.repositories.relationships import RelationshipRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import RelationshipType
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.relationships import (
    RelationshipCreate,
    RelationshipCreated,
    RelationshipRead,
    RelationshipUpdate,
)
from usogui_db.server.services.content import check_chapter_range, get_or_404
from usogui_db.server.services.deps import ModeratorUser, ProgressDep, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate
from usogui_db.server.services.spoilers import is_visible

logger = get_logger(__name__)

router = APIRouter()

# Explicit nulls on any other field leave the stored value in place
_NULLABLE_FIELDS = frozenset({"description", "end_chapter"})


def _check_distinct(source_character_id: int, target_character_id: int) -> None:
    if source_character_id == target_character_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A character cannot have a relationship with themselves",
        )


async def _check_characters(session, source_character_id: Optional[int], target_character_id: Optional[int]) -> None:
    repository = CharacterRepository(session)
    if source_character_id is not None and not await repository.exists(source_character_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Source character not found")
    if target_character_id is not None and not await repository.exists(target_character_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target character not found")


def _duplicate(source_character_id: int, target_character_id: int, start_chapter: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"A relationship from character {source_character_id} to {target_character_id} "
        f"at chapter {start_chapter} already exists",
    )


@router.get(
    "",
    response_model=Page[RelationshipRead],
    summary="List Relationships",
    description="All relationships, newest first, filtered by source, target and type.",
)
async def list_relationships(
    response: Response,
    params: PageDep,
    session: SessionDep,
    moderator: ModeratorUser,
    source_character_id: Optional[int] = None,
    target_character_id: Optional[int] = None,
    relationship_type: Optional[RelationshipType] = None,
) -> Page[RelationshipRead]:
    items, total = await RelationshipRepository(session).search(
        source_character_id=source_character_id,
        target_character_id=target_character_id,
        relationship_type=relationship_type,
        limit=params.limit,
        offset=params.offset,
    )
    return paginate(response, items, total, params, RelationshipRead.model_validate)


@router.get(
    "/{relationship_id}",
    response_model=RelationshipRead,
    summary="Get Relationship",
    description="A relationship revealed after the reader's progress is reported as not found.",
    responses={404: {"description": "Relationship not found"}},
)
async def get_relationship(relationship_id: int, session: SessionDep, progress: ProgressDep) -> RelationshipRead:
    relationship = await get_or_404(RelationshipRepository(session), relationship_id, "Relationship")
    if not is_visible(relationship.spoiler_chapter, progress):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Relationship not found")
    return RelationshipRead.model_validate(relationship)


@router.post(
    "",
    response_model=RelationshipCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create Relationship",
    responses={
        201: {"description": "Relationship created"},
        400: {"description": "Self relationship or end chapter before start chapter"},
        404: {"description": "Source or target character not found"},
        409: {"description": "Relationship already exists at this start chapter"},
    },
)
async def create_relationship(
    payload: RelationshipCreate, session: SessionDep, moderator: ModeratorUser
) -> RelationshipCreated:
    """
    Create a directed relationship.

    - **relationship_type**: How the source relates to the target.
    - **spoiler_chapter**: Chapter from which it may be shown; defaults to **start_chapter**.
    - **reverse_relationship_type**: Also create the target-to-source row, unless one already
      exists at the same start chapter. **reverse_description** defaults to **description**.
    """
    _check_distinct(payload.source_character_id, payload.target_character_id)
    check_chapter_range(payload.start_chapter, payload.end_chapter)
    await _check_characters(session, payload.source_character_id, payload.target_character_id)

    repository = RelationshipRepository(session)
    if await repository.find_existing(payload.source_character_id, payload.target_character_id, payload.start_chapter):
        raise _duplicate(payload.source_character_id, payload.target_character_id, payload.start_chapter)

    spoiler_chapter = payload.spoiler_chapter or payload.start_chapter
    shared = {
        "start_chapter": payload.start_chapter,
        "end_chapter": payload.end_chapter,
        "spoiler_chapter": spoiler_chapter,
    }
    primary = await repository.create(
        CharacterRelationship(
            source_character_id=payload.source_character_id,
            target_character_id=payload.target_character_id,
            relationship_type=payload.relationship_type,
            description=payload.description,
            **shared,
        )
    )

    reverse = None
    if payload.reverse_relationship_type is not None and not await repository.find_existing(
        payload.target_character_id, payload.source_character_id, payload.start_chapter
    ):
        reverse = await repository.create(
            CharacterRelationship(
                source_character_id=payload.target_character_id,
                target_character_id=payload.source_character_id,
                relationship_type=payload.reverse_relationship_type,
                description=payload.reverse_description or payload.description,
                **shared,
            )
        )

    logger.info(
        f"Relationship {primary.id} created by user {moderator.id}"
        + (f" with reverse {reverse.id}" if reverse else ""),
        extra={"relationship_id": primary.id, "moderator_id": moderator.id},
    )
    return RelationshipCreated(
        primary=RelationshipRead.model_validate(primary),
        reverse=RelationshipRead.model_validate(reverse) if reverse else None,
    )


@router.put(
    "/{relationship_id}",
    response_model=RelationshipRead,
    summary="Update Relationship",
    responses={
        400: {"description": "Self relationship or end chapter before start chapter"},
        404: {"description": "Relationship or character not found"},
        409: {"description": "Relationship already exists at this start chapter"},
    },
)
async def update_relationship(
    relationship_id: int, payload: RelationshipUpdate, session: SessionDep, moderator: ModeratorUser
) -> RelationshipRead:
    repository = RelationshipRepository(session)
    relationship = await get_or_404(repository, relationship_id, "Relationship")
    changes = {
        name: value
        for name, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or name in _NULLABLE_FIELDS
    }

    source_id = changes.get("source_character_id", relationship.source_character_id)
    target_id = changes.get("target_character_id", relationship.target_character_id)
    start_chapter = changes.get("start_chapter", relationship.start_chapter)
    _check_distinct(source_id, target_id)
    check_chapter_range(start_chapter, changes.get("end_chapter", relationship.end_chapter))
    await _check_characters(session, changes.get("source_character_id"), changes.get("target_character_id"))

    existing = await repository.find_existing(source_id, target_id, start_chapter)
    if existing is not None and existing.id != relationship.id:
        raise _duplicate(source_id, target_id, start_chapter)

    relationship = await repository.apply_changes(relationship, changes)
    return RelationshipRead.model_validate(relationship)


@router.delete(
    "/{relationship_id}",
    response_model=MessageResponse,
    summary="Delete Relationship",
    responses={404: {"description": "Relationship not found"}},
)
async def delete_relationship(relationship_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    if not await RelationshipRepository(session).delete(relationship_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Relationship not found")
    logger.info(f"Relationship {relationship_id} deleted by user {moderator.id}")
    return MessageResponse(message="Relationship deleted")
