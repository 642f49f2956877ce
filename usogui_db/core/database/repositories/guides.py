"""
Guide repository.

Handles the filtered guide listing, guide links (tags, characters, gambles),
view counting and the like toggle that keeps ``like_count`` in step with
``guide_likes``.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from usogui_db.core.models.domain import GuideStatus

from ..entities.guides import Guide, GuideCharacterLink, GuideGambleLink, GuideLike, GuideTagLink
from .base import QueryBuilder, SQLModelRepository
from .links import LinkSet

GUIDE_SORT_FIELDS = ("created_at", "like_count", "view_count", "title")


class GuideRepository(SQLModelRepository[Guide]):
    """Repository for guides, their links and likes."""

    default_order = "created_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Guide)
        self.tags = LinkSet(session, GuideTagLink, "guide_id", "tag_id")
        self.characters = LinkSet(session, GuideCharacterLink, "guide_id", "character_id")
        self.gambles = LinkSet(session, GuideGambleLink, "guide_id", "gamble_id")

    async def search(
        self,
        *,
        query: Optional[str] = None,
        status: Optional[GuideStatus] = None,
        author_id: Optional[int] = None,
        arc_id: Optional[int] = None,
        tag_id: Optional[int] = None,
        character_id: Optional[int] = None,
        gamble_id: Optional[int] = None,
        sort: str = "created_at",
        order: str = "desc",
        limit: int,
        offset: int,
    ) -> Tuple[List[Guide], int]:
        """List guides.

        Args:
            query: Substring of title or description
            status: Publication status filter
            author_id: Guides by one author
            arc_id: Guides about an arc
            tag_id: Guides carrying a tag
            character_id: Guides about a character
            gamble_id: Guides about a gamble
            sort: One of ``GUIDE_SORT_FIELDS``
            order: ``asc`` or ``desc``
        """
        stmt = select(Guide)
        stmt = QueryBuilder.apply_filters(stmt, Guide, {"status": status, "author_id": author_id, "arc_id": arc_id})
        stmt = QueryBuilder.apply_search(stmt, [Guide.title, Guide.description], query)
        if tag_id is not None:
            stmt = stmt.join(GuideTagLink, GuideTagLink.guide_id == Guide.id).where(GuideTagLink.tag_id == tag_id)
        if character_id is not None:
            stmt = stmt.join(GuideCharacterLink, GuideCharacterLink.guide_id == Guide.id).where(
                GuideCharacterLink.character_id == character_id
            )
        if gamble_id is not None:
            stmt = stmt.join(GuideGambleLink, GuideGambleLink.guide_id == Guide.id).where(
                GuideGambleLink.gamble_id == gamble_id
            )

        sort_column = getattr(Guide, sort if sort in GUIDE_SORT_FIELDS else "created_at")
        sort_expr = sort_column.asc() if order.lower() == "asc" else sort_column.desc()
        stmt = stmt.order_by(sort_expr, Guide.id.desc())
        return await self.fetch_page(stmt, limit, offset)

    async def increment_views(self, guide: Guide) -> Guide:
        guide.view_count = (guide.view_count or 0) + 1
        self.session.add(guide)
        await self.session.commit()
        await self.session.refresh(guide)
        return guide

    async def get_like(self, guide_id: int, user_id: int) -> Optional[GuideLike]:
        result = await self.session.execute(
            select(GuideLike).where(GuideLike.guide_id == guide_id, GuideLike.user_id == user_id)
        )
        return result.scalars().first()

    async def toggle_like(self, guide: Guide, user_id: int) -> Tuple[bool, int]:
        """Like the guide, or remove the like if the user already liked it.

        Returns:
            Tuple of (liked after the toggle, resulting like count)
        """
        existing = await self.get_like(guide.id, user_id)
        if existing is not None:
            await self.session.delete(existing)
            liked = False
        else:
            self.session.add(GuideLike(guide_id=guide.id, user_id=user_id))
            liked = True
        await self.session.flush()

        count_result = await self.session.execute(
            select(func.count()).select_from(GuideLike).where(GuideLike.guide_id == guide.id)
        )
        guide.like_count = int(count_result.scalar_one())
        self.session.add(guide)
        await self.session.commit()
        await self.session.refresh(guide)
        return liked, guide.like_count
