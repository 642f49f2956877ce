"""
Character relationship repository.

Reads return the relationship rows together with the character on the other
end and are spoiler-gated on ``spoiler_chapter``.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from usogui_db.core.models.domain import RelationshipType

from ..entities.characters import Character
from ..entities.relationships import CharacterRelationship
from .base import QueryBuilder, SQLModelRepository


class RelationshipRepository(SQLModelRepository[CharacterRelationship]):
    """Repository for directed character relationships."""

    default_order = "start_chapter"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CharacterRelationship)

    async def _with_counterpart(
        self, character_id: int, progress: Optional[int], outgoing: bool
    ) -> List[Tuple[CharacterRelationship, Character]]:
        own, other = (
            (CharacterRelationship.source_character_id, CharacterRelationship.target_character_id)
            if outgoing
            else (CharacterRelationship.target_character_id, CharacterRelationship.source_character_id)
        )
        stmt = (
            select(CharacterRelationship, Character)
            .join(Character, Character.id == other)
            .where(own == character_id)
            .order_by(CharacterRelationship.start_chapter, Character.name)
        )
        stmt = QueryBuilder.apply_spoiler_gate(stmt, CharacterRelationship.spoiler_chapter, progress)
        result = await self.session.execute(stmt)
        return [(relationship, character) for relationship, character in result.all()]

    async def outgoing(
        self, character_id: int, progress: Optional[int] = None
    ) -> List[Tuple[CharacterRelationship, Character]]:
        """Relationships from ``character_id`` to others, with the target characters."""
        return await self._with_counterpart(character_id, progress, outgoing=True)

    async def incoming(
        self, character_id: int, progress: Optional[int] = None
    ) -> List[Tuple[CharacterRelationship, Character]]:
        """Relationships from others to ``character_id``, with the source characters."""
        return await self._with_counterpart(character_id, progress, outgoing=False)

    async def between(
        self, character_id: int, other_id: int, progress: Optional[int] = None
    ) -> List[CharacterRelationship]:
        """Relationships between two characters in either direction."""
        stmt = (
            select(CharacterRelationship)
            .where(
                or_(
                    and_(
                        CharacterRelationship.source_character_id == character_id,
                        CharacterRelationship.target_character_id == other_id,
                    ),
                    and_(
                        CharacterRelationship.source_character_id == other_id,
                        CharacterRelationship.target_character_id == character_id,
                    ),
                )
            )
            .order_by(CharacterRelationship.start_chapter, CharacterRelationship.id)
        )
        stmt = QueryBuilder.apply_spoiler_gate(stmt, CharacterRelationship.spoiler_chapter, progress)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_existing(
        self, source_character_id: int, target_character_id: int, start_chapter: int
    ) -> Optional[CharacterRelationship]:
        stmt = select(CharacterRelationship).where(
            CharacterRelationship.source_character_id == source_character_id,
            CharacterRelationship.target_character_id == target_character_id,
            CharacterRelationship.start_chapter == start_chapter,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def search(
        self,
        *,
        source_character_id: Optional[int] = None,
        target_character_id: Optional[int] = None,
        relationship_type: Optional[RelationshipType] = None,
        limit: int,
        offset: int,
    ) -> Tuple[List[CharacterRelationship], int]:
        """All relationships, newest first, for moderation screens."""
        stmt = select(CharacterRelationship).order_by(CharacterRelationship.id.desc())
        stmt = QueryBuilder.apply_filters(
            stmt,
            CharacterRelationship,
            {
                "source_character_id": source_character_id,
                "target_character_id": target_character_id,
                "relationship_type": relationship_type,
            },
        )
        return await self.fetch_page(stmt, limit, offset)
