"""
Catalogue repositories: series, volumes, chapters and tags.

These tables have little behaviour beyond CRUD; the repositories add lookups
by natural key and the filtered listings used by the API.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import cast, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.types import String
from sqlmodel import select

from ..entities.chapters import Chapter
from ..entities.series import Series
from ..entities.tags import Tag
from ..entities.volumes import Volume
from .base import QueryBuilder, SQLModelRepository


class SeriesRepository(SQLModelRepository[Series]):
    """Repository for series."""

    default_order = "order"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Series)

    async def search(self, *, query: Optional[str], limit: int, offset: int) -> Tuple[List[Series], int]:
        stmt = select(Series).order_by(Series.order, Series.id)
        stmt = QueryBuilder.apply_search(stmt, [Series.name], query)
        return await self.fetch_page(stmt, limit, offset)


class VolumeRepository(SQLModelRepository[Volume]):
    """Repository for volumes."""

    default_order = "number"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Volume)

    async def get_by_number(self, number: int) -> Optional[Volume]:
        result = await self.session.execute(select(Volume).where(Volume.number == number))
        return result.scalars().first()

    async def find_containing_chapter(self, chapter_number: int) -> Optional[Volume]:
        """Return the volume whose chapter range includes ``chapter_number``."""
        stmt = (
            select(Volume)
            .where(Volume.start_chapter <= chapter_number, Volume.end_chapter >= chapter_number)
            .order_by(Volume.number)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()


class ChapterRepository(SQLModelRepository[Chapter]):
    """Repository for chapters."""

    default_order = "number"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Chapter)

    async def get_by_number(self, number: int) -> Optional[Chapter]:
        result = await self.session.execute(select(Chapter).where(Chapter.number == number))
        return result.scalars().first()

    async def search(
        self,
        *,
        query: Optional[str] = None,
        volume_id: Optional[int] = None,
        progress: Optional[int] = None,
        limit: int,
        offset: int,
    ) -> Tuple[List[Chapter], int]:
        """List chapters ordered by number.

        Args:
            query: Matches title, summary or the chapter number itself
            volume_id: Restrict to one volume
            progress: Hide chapters past the reader's progress
        """
        stmt = select(Chapter).order_by(Chapter.number)
        if volume_id is not None:
            stmt = stmt.where(Chapter.volume_id == volume_id)
        if query and query.strip():
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(
                or_(
                    Chapter.title.ilike(pattern),
                    Chapter.summary.ilike(pattern),
                    cast(Chapter.number, String).ilike(pattern),
                )
            )
        stmt = QueryBuilder.apply_spoiler_gate(stmt, Chapter.number, progress)
        return await self.fetch_page(stmt, limit, offset)


class TagRepository(SQLModelRepository[Tag]):
    """Repository for tags."""

    default_order = "name"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Tag)

    async def get_by_name(self, name: str) -> Optional[Tag]:
        result = await self.session.execute(select(Tag).where(func.lower(Tag.name) == name.lower()))
        return result.scalars().first()

    async def search(self, *, query: Optional[str], limit: int, offset: int) -> Tuple[List[Tag], int]:
        stmt = select(Tag).order_by(Tag.name)
        stmt = QueryBuilder.apply_search(stmt, [Tag.name, Tag.description], query)
        return await self.fetch_page(stmt, limit, offset)
