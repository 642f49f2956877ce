"""
Event repository.

Events are spoiler-gated on ``spoiler_chapter`` and fall back to
``chapter_number`` when no explicit spoiler chapter is set.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from usogui_db.core.models.domain import EventType

from ..entities.events import Event, EventCharacterLink, EventTagLink
from .base import QueryBuilder, SQLModelRepository
from .links import LinkSet

EVENT_GATE = func.coalesce(Event.spoiler_chapter, Event.chapter_number)


class EventRepository(SQLModelRepository[Event]):
    """Repository for story events and their character/tag links."""

    default_order = "chapter_number"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Event)
        self.characters = LinkSet(session, EventCharacterLink, "event_id", "character_id")
        self.tags = LinkSet(session, EventTagLink, "event_id", "tag_id")

    async def search(
        self,
        *,
        query: Optional[str] = None,
        type: Optional[EventType] = None,
        arc_id: Optional[int] = None,
        gamble_id: Optional[int] = None,
        character_id: Optional[int] = None,
        tag_id: Optional[int] = None,
        is_verified: Optional[bool] = None,
        progress: Optional[int] = None,
        limit: int,
        offset: int,
    ) -> Tuple[List[Event], int]:
        """List events in chapter order.

        Args:
            query: Substring of title or description
            type: Event type filter
            arc_id: Events belonging to an arc
            gamble_id: Events belonging to a gamble
            character_id: Events involving a character
            tag_id: Events carrying a tag
            is_verified: Verification filter
            progress: Hide events past the reader's progress
        """
        stmt = select(Event).order_by(Event.chapter_number, Event.id)
        stmt = QueryBuilder.apply_filters(
            stmt, Event, {"type": type, "arc_id": arc_id, "gamble_id": gamble_id, "is_verified": is_verified}
        )
        stmt = QueryBuilder.apply_search(stmt, [Event.title, Event.description], query)
        if character_id is not None:
            stmt = stmt.join(EventCharacterLink, EventCharacterLink.event_id == Event.id).where(
                EventCharacterLink.character_id == character_id
            )
        if tag_id is not None:
            stmt = stmt.join(EventTagLink, EventTagLink.event_id == Event.id).where(EventTagLink.tag_id == tag_id)
        stmt = QueryBuilder.apply_spoiler_gate(stmt, EVENT_GATE, progress)
        return await self.fetch_page(stmt, limit, offset)

    async def list_gated(self, progress: Optional[int] = None, arc_id: Optional[int] = None) -> List[Event]:
        """All visible events, optionally for one arc, in chapter order."""
        stmt = select(Event).order_by(Event.chapter_number, Event.id)
        if arc_id is not None:
            stmt = stmt.where(Event.arc_id == arc_id)
        stmt = QueryBuilder.apply_spoiler_gate(stmt, EVENT_GATE, progress)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
