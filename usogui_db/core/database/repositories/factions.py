"""
Faction repository.

Besides faction CRUD this repository manages ``character_factions`` rows.
Memberships are spoiler-gated on ``spoiler_chapter``, falling back to
``start_chapter``.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.characters import Character
from ..entities.factions import CharacterFaction, Faction
from .base import QueryBuilder, SQLModelRepository

_MEMBERSHIP_GATE = func.coalesce(CharacterFaction.spoiler_chapter, CharacterFaction.start_chapter)


class FactionRepository(SQLModelRepository[Faction]):
    """Repository for factions and character memberships."""

    default_order = "name"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Faction)

    async def get_by_name(self, name: str) -> Optional[Faction]:
        result = await self.session.execute(select(Faction).where(func.lower(Faction.name) == name.lower()))
        return result.scalars().first()

    async def search(self, *, query: Optional[str], limit: int, offset: int) -> Tuple[List[Faction], int]:
        stmt = select(Faction).order_by(Faction.name)
        stmt = QueryBuilder.apply_search(stmt, [Faction.name, Faction.description], query)
        return await self.fetch_page(stmt, limit, offset)

    async def members(
        self, faction_id: int, progress: Optional[int] = None
    ) -> List[Tuple[CharacterFaction, Character]]:
        """Memberships of a faction with their characters, ordered by start chapter."""
        stmt = (
            select(CharacterFaction, Character)
            .join(Character, Character.id == CharacterFaction.character_id)
            .where(CharacterFaction.faction_id == faction_id)
            .order_by(CharacterFaction.start_chapter, Character.name)
        )
        stmt = QueryBuilder.apply_spoiler_gate(stmt, _MEMBERSHIP_GATE, progress)
        result = await self.session.execute(stmt)
        return [(membership, character) for membership, character in result.all()]

    async def memberships_for_character(
        self, character_id: int, progress: Optional[int] = None
    ) -> List[Tuple[CharacterFaction, Faction]]:
        """Factions a character belongs to, with the membership rows."""
        stmt = (
            select(CharacterFaction, Faction)
            .join(Faction, Faction.id == CharacterFaction.faction_id)
            .where(CharacterFaction.character_id == character_id)
            .order_by(CharacterFaction.start_chapter, Faction.name)
        )
        stmt = QueryBuilder.apply_spoiler_gate(stmt, _MEMBERSHIP_GATE, progress)
        result = await self.session.execute(stmt)
        return [(membership, faction) for membership, faction in result.all()]

    async def get_membership(self, character_id: int, faction_id: int) -> Optional[CharacterFaction]:
        stmt = select(CharacterFaction).where(
            CharacterFaction.character_id == character_id, CharacterFaction.faction_id == faction_id
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_membership(self, membership: CharacterFaction) -> CharacterFaction:
        self.session.add(membership)
        await self.session.commit()
        await self.session.refresh(membership)
        return membership

    async def remove_membership(self, character_id: int, faction_id: int) -> bool:
        membership = await self.get_membership(character_id, faction_id)
        if membership is None:
            return False
        await self.session.delete(membership)
        await self.session.commit()
        return True
