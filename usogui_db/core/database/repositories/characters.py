"""
Character repository.

Provides the filtered and sorted character listing. Relationship reads
(events, quotes, gambles, guides, faction memberships) live in the
repositories of the related tables.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import String, cast, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.arcs import Arc
from ..entities.characters import Character
from ..entities.factions import CharacterFaction
from .base import QueryBuilder, SQLModelRepository

CHARACTER_SORT_FIELDS = ("name", "first_appearance_chapter", "id")


class CharacterRepository(SQLModelRepository[Character]):
    """Repository for characters."""

    default_order = "name"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Character)

    async def search(
        self,
        *,
        query: Optional[str] = None,
        description: Optional[str] = None,
        faction_id: Optional[int] = None,
        arc: Optional[Arc] = None,
        sort: str = "name",
        order: str = "asc",
        limit: int,
        offset: int,
    ) -> Tuple[List[Character], int]:
        """List characters.

        Args:
            query: Substring of the name or of any alternate name
            description: Substring of the description
            faction_id: Only members of this faction
            arc: Only characters first appearing inside this arc's chapter range
            sort: One of ``CHARACTER_SORT_FIELDS``
            order: ``asc`` or ``desc``
        """
        stmt = select(Character)
        if query and query.strip():
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(
                or_(Character.name.ilike(pattern), cast(Character.alternate_names, String).ilike(pattern))
            )
        stmt = QueryBuilder.apply_search(stmt, [Character.description], description)
        if faction_id is not None:
            stmt = stmt.join(CharacterFaction, CharacterFaction.character_id == Character.id).where(
                CharacterFaction.faction_id == faction_id
            )
        if arc is not None:
            if arc.start_chapter is not None:
                stmt = stmt.where(Character.first_appearance_chapter >= arc.start_chapter)
            if arc.end_chapter is not None:
                stmt = stmt.where(Character.first_appearance_chapter <= arc.end_chapter)

        sort_column = getattr(Character, sort if sort in CHARACTER_SORT_FIELDS else "name")
        sort_expr = sort_column.desc() if order.lower() == "desc" else sort_column.asc()
        stmt = stmt.order_by(sort_expr, Character.id)
        return await self.fetch_page(stmt, limit, offset)
