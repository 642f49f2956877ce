"""Annotation repository."""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from usogui_db.core.models.domain import AnnotationOwnerType, AnnotationStatus

from ..entities.annotations import Annotation
from .base import QueryBuilder, SQLModelRepository


class AnnotationRepository(SQLModelRepository[Annotation]):
    """Repository for reader annotations."""

    default_order = "created_at"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Annotation)

    async def search(
        self,
        *,
        status: Optional[AnnotationStatus] = None,
        owner_type: Optional[AnnotationOwnerType] = None,
        owner_id: Optional[int] = None,
        author_id: Optional[int] = None,
        chapter_reference: Optional[int] = None,
        progress: Optional[int] = None,
        oldest_first: bool = False,
        limit: int,
        offset: int,
    ) -> Tuple[List[Annotation], int]:
        """List annotations, newest first unless ``oldest_first``.

        A ``status`` of None means no status filter. Spoiler annotations past
        ``progress`` are hidden.
        """
        if oldest_first:
            stmt = select(Annotation).order_by(Annotation.created_at, Annotation.id)
        else:
            stmt = select(Annotation).order_by(Annotation.created_at.desc(), Annotation.id.desc())
        stmt = QueryBuilder.apply_filters(
            stmt,
            Annotation,
            {
                "status": status,
                "owner_type": owner_type,
                "owner_id": owner_id,
                "author_id": author_id,
                "chapter_reference": chapter_reference,
            },
        )
        stmt = QueryBuilder.apply_spoiler_gate(stmt, Annotation.spoiler_chapter, progress)
        return await self.fetch_page(stmt, limit, offset)

    async def count_pending(self) -> int:
        return await self.count({"status": AnnotationStatus.pending})
