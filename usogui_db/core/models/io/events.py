"""Event I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from usogui_db.core.models.domain import EventType


class ChapterReference(BaseModel):
    """Another chapter the event refers to."""

    chapter_number: int = Field(ge=1)
    context: Optional[str] = None


class EventRead(BaseModel):
    """Schema for reading an event, including linked character and tag ids."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    type: EventType
    chapter_number: int
    spoiler_chapter: Optional[int] = None
    page_numbers: List[int] = Field(default_factory=list)
    chapter_references: List[ChapterReference] = Field(default_factory=list)
    is_verified: bool
    arc_id: Optional[int] = None
    gamble_id: Optional[int] = None
    created_by_id: Optional[int] = None
    character_ids: List[int] = Field(default_factory=list)
    tag_ids: List[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class EventCreate(BaseModel):
    """Schema for creating an event via API."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    type: EventType = EventType.other
    chapter_number: int = Field(ge=1)
    spoiler_chapter: Optional[int] = Field(default=None, ge=1)
    page_numbers: List[int] = Field(default_factory=list)
    chapter_references: List[ChapterReference] = Field(default_factory=list)
    is_verified: bool = False
    arc_id: Optional[int] = None
    gamble_id: Optional[int] = None
    character_ids: List[int] = Field(default_factory=list)
    tag_ids: List[int] = Field(default_factory=list)


class EventUpdate(BaseModel):
    """Schema for updating an event via API."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[EventType] = None
    chapter_number: Optional[int] = Field(default=None, ge=1)
    spoiler_chapter: Optional[int] = Field(default=None, ge=1)
    page_numbers: Optional[List[int]] = None
    chapter_references: Optional[List[ChapterReference]] = None
    is_verified: Optional[bool] = None
    arc_id: Optional[int] = None
    gamble_id: Optional[int] = None
    character_ids: Optional[List[int]] = None
    tag_ids: Optional[List[int]] = None


class ArcEventsRead(BaseModel):
    """Events of one arc; ``arc`` is None for events without an arc."""

    arc_id: Optional[int] = None
    arc_name: Optional[str] = None
    events: List[EventRead]
