"""
Translation repository.

A single repository class serves every translation table; it is bound to one
``TranslationTable`` entry from the registry at construction time.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from sqlalchemy import distinct, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from usogui_db.core.models.domain import Language

from ..entities.translations import TranslationBase, TranslationTable
from .base import SQLModelRepository


class TranslationRepository(SQLModelRepository[TranslationBase]):
    """Repository for the translation table of one entity kind."""

    default_order = "language"

    def __init__(self, session: AsyncSession, table: TranslationTable) -> None:
        super().__init__(session, table.model)
        self.table = table

    async def parent_exists(self, entity_id: int) -> bool:
        parent = self.table.parent
        result = await self.session.execute(select(parent.id).where(parent.id == entity_id))
        return result.scalar_one_or_none() is not None

    async def for_entity(self, entity_id: int) -> List[TranslationBase]:
        model = self.model
        stmt = select(model).where(model.entity_id == entity_id).order_by(model.language)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for(self, entity_id: int, language: Language) -> Optional[TranslationBase]:
        model = self.model
        stmt = select(model).where(model.entity_id == entity_id, model.language == language)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def for_entities(self, entity_ids: Sequence[int], language: Language) -> Dict[int, TranslationBase]:
        """Translations of several entities in one language, keyed by entity id."""
        if not entity_ids:
            return {}
        model = self.model
        stmt = select(model).where(model.entity_id.in_(list(entity_ids)), model.language == language)
        result = await self.session.execute(stmt)
        return {row.entity_id: row for row in result.scalars().all()}

    async def count_parents(self) -> int:
        parent = self.table.parent
        result = await self.session.execute(select(func.count()).select_from(parent))
        return int(result.scalar_one())

    async def count_translated(self, language: Language) -> int:
        """Number of distinct entities that have a translation in ``language``."""
        model = self.model
        stmt = select(func.count(distinct(model.entity_id))).where(model.language == language)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
