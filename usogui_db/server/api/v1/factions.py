"""
Faction Endpoints.

Factions and their (spoiler-gated) member lists. Memberships are managed
from the character side, see ``characters.py``.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.factions import Faction
from usogui_db.core.database.repositories.factions import FactionRepository
from usogui_db.core.models.domain import Language, TranslatableEntity
from usogui_db.core.models.io.catalogue import FactionCreate, FactionRead, FactionUpdate
from usogui_db.core.models.io.characters import FactionMemberRead
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.server.services.content import get_or_404
from usogui_db.server.services.deps import ModeratorUser, ProgressDep, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate
from usogui_db.server.services.translations import TranslationService

router = APIRouter()


@router.get("", response_model=Page[FactionRead], summary="List Factions", description="List factions by name.")
async def list_factions(
    response: Response,
    params: PageDep,
    session: SessionDep,
    name: Optional[str] = None,
    lang: Optional[Language] = None,
) -> Page[FactionRead]:
    items, total = await FactionRepository(session).search(query=name, limit=params.limit, offset=params.offset)
    page = paginate(response, items, total, params, FactionRead.model_validate)
    page.data = await TranslationService(session).localize_many(TranslatableEntity.faction, page.data, lang)
    return page


@router.get(
    "/{faction_id}",
    response_model=FactionRead,
    summary="Get Faction",
    responses={404: {"description": "Faction not found"}},
)
async def get_faction(faction_id: int, session: SessionDep, lang: Optional[Language] = None) -> FactionRead:
    faction = await get_or_404(FactionRepository(session), faction_id, "Faction")
    return await TranslationService(session).localize(
        TranslatableEntity.faction, FactionRead.model_validate(faction), lang
    )


@router.get(
    "/{faction_id}/members",
    response_model=List[FactionMemberRead],
    summary="Faction Members",
    description="Members of a faction; memberships revealed past the reader's progress are hidden.",
    responses={404: {"description": "Faction not found"}},
)
async def get_faction_members(faction_id: int, session: SessionDep, progress: ProgressDep) -> List[FactionMemberRead]:
    repository = FactionRepository(session)
    await get_or_404(repository, faction_id, "Faction")
    members = await repository.members(faction_id, progress)
    return [
        FactionMemberRead(**membership.model_dump(), character_name=character.name)
        for membership, character in members
    ]


@router.post(
    "",
    response_model=FactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Faction",
    responses={
        201: {"description": "Faction created"},
        409: {"description": "Faction name already exists"},
    },
)
async def create_faction(payload: FactionCreate, session: SessionDep, moderator: ModeratorUser) -> FactionRead:
    repository = FactionRepository(session)
    if await repository.get_by_name(payload.name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faction with this name already exists")
    faction = await repository.create(Faction.model_validate(payload))
    return FactionRead.model_validate(faction)


@router.put(
    "/{faction_id}",
    response_model=FactionRead,
    summary="Update Faction",
    responses={
        404: {"description": "Faction not found"},
        409: {"description": "Faction name already exists"},
    },
)
async def update_faction(
    faction_id: int, payload: FactionUpdate, session: SessionDep, moderator: ModeratorUser
) -> FactionRead:
    repository = FactionRepository(session)
    faction = await get_or_404(repository, faction_id, "Faction")
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("name"):
        existing = await repository.get_by_name(changes["name"])
        if existing is not None and existing.id != faction_id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faction with this name already exists")
    faction = await repository.apply_changes(faction, changes)
    return FactionRead.model_validate(faction)


@router.delete(
    "/{faction_id}",
    response_model=MessageResponse,
    summary="Delete Faction",
    responses={404: {"description": "Faction not found"}},
)
async def delete_faction(faction_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    if not await FactionRepository(session).delete(faction_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faction not found")
    return MessageResponse(message="Faction deleted")
