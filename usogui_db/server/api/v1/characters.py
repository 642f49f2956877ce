"""
Character Endpoints.

Character listing with name/alias search, faction and arc filters and
sorting; related reads (events, quotes, gambles, guides, factions,
relationships); and faction membership management for moderators.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, Response, status

from usogui_db.core.database.entities.characters import Character
from usogui_db.core.database.entities.factions import CharacterFaction
from usogui_db.core.database.repositories.arcs import ArcRepository
from usogui_db.core.database.repositories.characters import CharacterRepository
from usogui_db.core.database.repositories.events import EventRepository
from usogui_db.core.database.repositories.factions import FactionRepository
from usogui_db.core.database.repositories.gambles import GambleRepository
from usogui_db.core.database.repositories.guides import GuideRepository
from usogui_db.core.database.repositories.quotes import QuoteRepository
from usogui_db.core.database.repositories.relationships import RelationshipRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import GuideStatus, Language, TranslatableEntity
from usogui_db.core.models.io.characters import (
    CharacterCreate,
    CharacterMembershipRead,
    CharacterRead,
    CharacterUpdate,
    MembershipCreate,
)
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.events import EventRead
from usogui_db.core.models.io.gambles import GambleRead
from usogui_db.core.models.io.guides import GuideRead
from usogui_db.core.models.io.quotes import QuoteRead
from usogui_db.core.models.io.relationships import CharacterRelationshipsRead, RelatedCharacterRead, RelationshipRead
from usogui_db.server.services.content import (
    check_chapter_range,
    event_reads,
    gamble_reads,
    get_or_404,
    guide_reads,
)
from usogui_db.server.services.deps import ModeratorUser, ProgressDep, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate
from usogui_db.server.services.translations import TranslationService

logger = get_logger(__name__)

router = APIRouter()

# Related listings return everything for one character
RELATED_LIMIT = 1000


@router.get(
    "",
    response_model=Page[CharacterRead],
    summary="List Characters",
    description="List characters with name/alias search, faction and arc filters, and sorting.",
)
async def list_characters(
    response: Response,
    params: PageDep,
    session: SessionDep,
    name: Optional[str] = Query(default=None, description="Matches the name or any alternate name"),
    description: Optional[str] = Query(default=None, description="Substring of the description"),
    faction_id: Optional[int] = None,
    arc_id: Optional[int] = Query(default=None, description="First appearance within the arc's chapter range"),
    sort: Literal["name", "first_appearance_chapter", "id"] = "name",
    order: Literal["asc", "desc"] = "asc",
    lang: Optional[Language] = None,
) -> Page[CharacterRead]:
    arc = await get_or_404(ArcRepository(session), arc_id, "Arc") if arc_id is not None else None
    items, total = await CharacterRepository(session).search(
        query=name,
        description=description,
        faction_id=faction_id,
        arc=arc,
        sort=sort,
        order=order,
        limit=params.limit,
        offset=params.offset,
    )
    page = paginate(response, items, total, params, CharacterRead.model_validate)
    page.data = await TranslationService(session).localize_many(TranslatableEntity.character, page.data, lang)
    return page


@router.get(
    "/{character_id}",
    response_model=CharacterRead,
    summary="Get Character",
    responses={404: {"description": "Character not found"}},
)
async def get_character(character_id: int, session: SessionDep, lang: Optional[Language] = None) -> CharacterRead:
    character = await get_or_404(CharacterRepository(session), character_id, "Character")
    return await TranslationService(session).localize(
        TranslatableEntity.character, CharacterRead.model_validate(character), lang
    )


@router.post(
    "",
    response_model=CharacterRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Character",
    responses={201: {"description": "Character created"}},
)
async def create_character(payload: CharacterCreate, session: SessionDep, moderator: ModeratorUser) -> CharacterRead:
    character = await CharacterRepository(session).create(Character.model_validate(payload))
    logger.info(f"Character {character.id} ({character.name}) created by user {moderator.id}")
    return CharacterRead.model_validate(character)


@router.put(
    "/{character_id}",
    response_model=CharacterRead,
    summary="Update Character",
    responses={404: {"description": "Character not found"}},
)
async def update_character(
    character_id: int, payload: CharacterUpdate, session: SessionDep, moderator: ModeratorUser
) -> CharacterRead:
    repository = CharacterRepository(session)
    character = await get_or_404(repository, character_id, "Character")
    character = await repository.apply_changes(character, payload.model_dump(exclude_unset=True))
    return CharacterRead.model_validate(character)


@router.delete(
    "/{character_id}",
    response_model=MessageResponse,
    summary="Delete Character",
    responses={404: {"description": "Character not found"}},
)
async def delete_character(character_id: int, session: SessionDep, moderator: ModeratorUser) -> MessageResponse:
    if not await CharacterRepository(session).delete(character_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Character not found")
    return MessageResponse(message="Character deleted")


# =====================================================================
# Related content
# =====================================================================


@router.get(
    "/{character_id}/events",
    response_model=List[EventRead],
    summary="Character Events",
    description="Events involving the character, hidden past the reader's progress.",
    responses={404: {"description": "Character not found"}},
)
async def get_character_events(character_id: int, session: SessionDep, progress: ProgressDep) -> List[EventRead]:
    await get_or_404(CharacterRepository(session), character_id, "Character")
    repository = EventRepository(session)
    events, _ = await repository.search(
        character_id=character_id, progress=progress, limit=RELATED_LIMIT, offset=0
    )
    return await event_reads(repository, events)


@router.get(
    "/{character_id}/quotes",
    response_model=List[QuoteRead],
    summary="Character Quotes",
    description="Quotes by the character, hidden past the reader's progress.",
    responses={404: {"description": "Character not found"}},
)
async def get_character_quotes(character_id: int, session: SessionDep, progress: ProgressDep) -> List[QuoteRead]:
    await get_or_404(CharacterRepository(session), character_id, "Character")
    quotes, _ = await QuoteRepository(session).search(
        character_id=character_id, progress=progress, limit=RELATED_LIMIT, offset=0
    )
    return [QuoteRead.model_validate(quote) for quote in quotes]


@router.get(
    "/{character_id}/gambles",
    response_model=List[GambleRead],
    summary="Character Gambles",
    description="Gambles the character took part in.",
    responses={404: {"description": "Character not found"}},
)
async def get_character_gambles(character_id: int, session: SessionDep) -> List[GambleRead]:
    await get_or_404(CharacterRepository(session), character_id, "Character")
    repository = GambleRepository(session)
    gambles, _ = await repository.search(character_id=character_id, limit=RELATED_LIMIT, offset=0)
    return await gamble_reads(repository, gambles)


@router.get(
    "/{character_id}/guides",
    response_model=List[GuideRead],
    summary="Character Guides",
    description="Published guides about the character.",
    responses={404: {"description": "Character not found"}},
)
async def get_character_guides(character_id: int, session: SessionDep) -> List[GuideRead]:
    await get_or_404(CharacterRepository(session), character_id, "Character")
    repository = GuideRepository(session)
    guides, _ = await repository.search(
        character_id=character_id, status=GuideStatus.published, limit=RELATED_LIMIT, offset=0
    )
    return await guide_reads(repository, guides)


# =====================================================================
# Faction memberships
# =====================================================================


@router.get(
    "/{character_id}/factions",
    response_model=List[CharacterMembershipRead],
    summary="Character Factions",
    description="Faction memberships of the character, hidden past the reader's progress.",
    responses={404: {"description": "Character not found"}},
)
async def get_character_factions(
    character_id: int, session: SessionDep, progress: ProgressDep
) -> List[CharacterMembershipRead]:
    await get_or_404(CharacterRepository(session), character_id, "Character")
    memberships = await FactionRepository(session).memberships_for_character(character_id, progress)
    return [
        CharacterMembershipRead(**membership.model_dump(), faction_name=faction.name)
        for membership, faction in memberships
    ]


@router.post(
    "/{character_id}/factions",
    response_model=CharacterMembershipRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Faction Membership",
    responses={
        201: {"description": "Membership added"},
        400: {"description": "End chapter before start chapter"},
        404: {"description": "Character or faction not found"},
        409: {"description": "Character is already a member"},
    },
)
async def add_character_faction(
    character_id: int, payload: MembershipCreate, session: SessionDep, moderator: ModeratorUser
) -> CharacterMembershipRead:
    """
    Add the character to a faction.

    - **faction_id**: The faction to join.
    - **role**: Optional role inside the faction.
    - **start_chapter** / **end_chapter**: Chapter range of the membership.
    - **spoiler_chapter**: Chapter from which the membership may be revealed.
    """
    check_chapter_range(payload.start_chapter, payload.end_chapter)
    await get_or_404(CharacterRepository(session), character_id, "Character")
    repository = FactionRepository(session)
    faction = await get_or_404(repository, payload.faction_id, "Faction")
    if await repository.get_membership(character_id, payload.faction_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Character is already a member of this faction"
        )
    membership = await repository.add_membership(
        CharacterFaction(character_id=character_id, **payload.model_dump())
    )
    return CharacterMembershipRead(**membership.model_dump(), faction_name=faction.name)


@router.delete(
    "/{character_id}/factions/{faction_id}",
    response_model=MessageResponse,
    summary="Remove Faction Membership",
    responses={404: {"description": "Membership not found"}},
)
async def remove_character_faction(
    character_id: int, faction_id: int, session: SessionDep, moderator: ModeratorUser
) -> MessageResponse:
    if not await FactionRepository(session).remove_membership(character_id, faction_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membership not found")
    return MessageResponse(message="Membership removed")


# =====================================================================
# Relationships
# =====================================================================


@router.get(
    "/{character_id}/relationships",
    response_model=CharacterRelationshipsRead,
    summary="Character Relationships",
    description="Relationships from and to the character, hidden before their spoiler chapter.",
    responses={404: {"description": "Character not found"}},
)
async def get_character_relationships(
    character_id: int, session: SessionDep, progress: ProgressDep
) -> CharacterRelationshipsRead:
    await get_or_404(CharacterRepository(session), character_id, "Character")
    repository = RelationshipRepository(session)
    return CharacterRelationshipsRead(
        outgoing=[
            RelatedCharacterRead(**relationship.model_dump(), character_name=target.name)
            for relationship, target in await repository.outgoing(character_id, progress)
        ],
        incoming=[
            RelatedCharacterRead(**relationship.model_dump(), character_name=source.name)
            for relationship, source in await repository.incoming(character_id, progress)
        ],
    )


@router.get(
    "/{character_id}/relationships/{other_id}",
    response_model=List[RelationshipRead],
    summary="Relationships Between Characters",
    description="Relationships between two characters in both directions, in chapter order.",
    responses={404: {"description": "Character not found"}},
)
async def get_relationships_between(
    character_id: int, other_id: int, session: SessionDep, progress: ProgressDep
) -> List[RelationshipRead]:
    characters = CharacterRepository(session)
    await get_or_404(characters, character_id, "Character")
    await get_or_404(characters, other_id, "Character")
    relationships = await RelationshipRepository(session).between(character_id, other_id, progress)
    return [RelationshipRead.model_validate(relationship) for relationship in relationships]
