"""Arc repository."""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.arcs import Arc
from ..entities.chapters import Chapter
from ..entities.gambles import Gamble
from .base import QueryBuilder, SQLModelRepository


class ArcRepository(SQLModelRepository[Arc]):
    """Repository for story arcs."""

    default_order = "order"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Arc)

    async def search(
        self,
        *,
        query: Optional[str] = None,
        series_id: Optional[int] = None,
        parent_id: Optional[int] = None,
        limit: int,
        offset: int,
    ) -> Tuple[List[Arc], int]:
        """List arcs in reading order, filtered by name, series and parent arc."""
        stmt = select(Arc).order_by(Arc.order, Arc.id)
        stmt = QueryBuilder.apply_filters(stmt, Arc, {"series_id": series_id, "parent_id": parent_id})
        stmt = QueryBuilder.apply_search(stmt, [Arc.name], query)
        return await self.fetch_page(stmt, limit, offset)

    async def list_all(self) -> List[Arc]:
        result = await self.session.execute(select(Arc).order_by(Arc.order, Arc.id))
        return list(result.scalars().all())

    async def gambles_in_arc(self, arc: Arc) -> List[Gamble]:
        """Gambles whose starting chapter lies inside the arc's chapter range."""
        if arc.start_chapter is None or arc.end_chapter is None:
            return []
        stmt = (
            select(Gamble)
            .join(Chapter, Chapter.id == Gamble.chapter_id)
            .where(Chapter.number >= arc.start_chapter, Chapter.number <= arc.end_chapter)
            .order_by(Chapter.number, Gamble.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
