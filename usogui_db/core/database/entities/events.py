"""
Story event entity models.

Events are spoiler-gated by ``spoiler_chapter`` (falling back to
``chapter_number``) and link to characters and tags through join tables.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from usogui_db.core.models.domain import EventType

from ..base import Base, utc_now


class EventBase(Base):
    """Base fields for a story event."""

    title: str = Field(max_length=255, index=True)
    description: str = Field(description="What happens in the event")
    type: EventType = Field(default=EventType.other)
    chapter_number: int = Field(ge=1, index=True, description="Chapter in which the event occurs")
    spoiler_chapter: Optional[int] = Field(
        default=None, ge=1, description="Chapter a reader must reach before the event is shown"
    )
    is_verified: bool = Field(default=False)
    arc_id: Optional[int] = Field(default=None, foreign_key="arcs.id", ondelete="SET NULL", index=True)
    gamble_id: Optional[int] = Field(default=None, foreign_key="gambles.id", ondelete="SET NULL", index=True)
    created_by_id: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")


class Event(EventBase, table=True):
    """A notable story event.

    Table: events
    """

    __tablename__ = "events"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    page_numbers: List[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False, default=list))
    chapter_references: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False, default=list)
    )

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def gating_chapter(self) -> int:
        return self.spoiler_chapter if self.spoiler_chapter is not None else self.chapter_number


class EventCharacterLink(Base, table=True):
    """Characters involved in an event.

    Table: event_characters
    """

    __tablename__ = "event_characters"
    __table_args__ = ({"extend_existing": True},)

    event_id: int = Field(foreign_key="events.id", ondelete="CASCADE", primary_key=True)
    character_id: int = Field(foreign_key="characters.id", ondelete="CASCADE", primary_key=True)


class EventTagLink(Base, table=True):
    """Tags attached to an event.

    Table: event_tags
    """

    __tablename__ = "event_tags"
    __table_args__ = ({"extend_existing": True},)

    event_id: int = Field(foreign_key="events.id", ondelete="CASCADE", primary_key=True)
    tag_id: int = Field(foreign_key="tags.id", ondelete="CASCADE", primary_key=True)
