"""
Media repository.

Provides the moderated media listing and the thumbnail lookup for an owner
entity.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from usogui_db.core.models.domain import MediaOwnerType, MediaPurpose, MediaStatus, MediaType

from ..entities.media import Media
from .base import QueryBuilder, SQLModelRepository


class MediaRepository(SQLModelRepository[Media]):
    """Repository for media submissions."""

    default_order = "created_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Media)

    async def get_by_url(self, url: str) -> Optional[Media]:
        result = await self.session.execute(select(Media).where(Media.url == url))
        return result.scalars().first()

    async def search(
        self,
        *,
        status: Optional[MediaStatus] = None,
        type: Optional[MediaType] = None,
        owner_type: Optional[MediaOwnerType] = None,
        owner_id: Optional[int] = None,
        purpose: Optional[MediaPurpose] = None,
        submitted_by_id: Optional[int] = None,
        progress: Optional[int] = None,
        limit: int,
        offset: int,
    ) -> Tuple[List[Media], int]:
        """List media, newest first.

        A ``status`` of None means no status filter.
        """
        stmt = select(Media).order_by(Media.created_at.desc(), Media.id.desc())
        stmt = QueryBuilder.apply_filters(
            stmt,
            Media,
            {
                "status": status,
                "type": type,
                "owner_type": owner_type,
                "owner_id": owner_id,
                "purpose": purpose,
                "submitted_by_id": submitted_by_id,
            },
        )
        stmt = QueryBuilder.apply_spoiler_gate(stmt, Media.chapter_number, progress)
        return await self.fetch_page(stmt, limit, offset)

    async def find_thumbnail(
        self, owner_type: MediaOwnerType, owner_id: int, progress: Optional[int] = None
    ) -> Optional[Media]:
        """Pick the display image for an owner entity.

        Among approved ``entity_display`` media, prefer the one with the
        highest chapter not beyond ``progress`` (newest first on ties);
        otherwise fall back to the newest display media.
        """
        base = select(Media).where(
            Media.owner_type == owner_type,
            Media.owner_id == owner_id,
            Media.purpose == MediaPurpose.entity_display,
            Media.status == MediaStatus.approved,
        )
        if progress is not None:
            stmt = (
                base.where(Media.chapter_number.is_not(None), Media.chapter_number <= progress)
                .order_by(Media.chapter_number.desc(), Media.created_at.desc(), Media.id.desc())
                .limit(1)
            )
            result = await self.session.execute(stmt)
            media = result.scalars().first()
            if media is not None:
                return media

        result = await self.session.execute(base.order_by(Media.created_at.desc(), Media.id.desc()).limit(1))
        return result.scalars().first()
