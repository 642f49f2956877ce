"""Quote repository."""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.quotes import Quote
from .base import QueryBuilder, SQLModelRepository


class QuoteRepository(SQLModelRepository[Quote]):
    """Repository for character quotes."""

    default_order = "chapter_number"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Quote)

    async def search(
        self,
        *,
        query: Optional[str] = None,
        character_id: Optional[int] = None,
        chapter_number: Optional[int] = None,
        progress: Optional[int] = None,
        limit: int,
        offset: int,
    ) -> Tuple[List[Quote], int]:
        """List quotes in chapter order, gated on the quote's chapter."""
        stmt = select(Quote).order_by(Quote.chapter_number, Quote.id)
        stmt = QueryBuilder.apply_filters(stmt, Quote, {"character_id": character_id, "chapter_number": chapter_number})
        stmt = QueryBuilder.apply_search(stmt, [Quote.text, Quote.description], query)
        stmt = QueryBuilder.apply_spoiler_gate(stmt, Quote.chapter_number, progress)
        return await self.fetch_page(stmt, limit, offset)

    async def random(self, character_id: Optional[int] = None, progress: Optional[int] = None) -> Optional[Quote]:
        stmt = select(Quote)
        if character_id is not None:
            stmt = stmt.where(Quote.character_id == character_id)
        stmt = QueryBuilder.apply_spoiler_gate(stmt, Quote.chapter_number, progress)
        result = await self.session.execute(stmt.order_by(func.random()).limit(1))
        return result.scalars().first()
