"""Guide I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from usogui_db.core.models.domain import GuideStatus


class GuideRead(BaseModel):
    """Schema for reading a guide, including linked ids."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    content: str
    status: GuideStatus
    view_count: int
    like_count: int
    author_id: int
    arc_id: Optional[int] = None
    rejection_reason: Optional[str] = None
    tag_ids: List[int] = Field(default_factory=list)
    character_ids: List[int] = Field(default_factory=list)
    gamble_ids: List[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class GuideCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=1000)
    content: str = Field(min_length=1)
    arc_id: Optional[int] = None
    tag_ids: List[int] = Field(default_factory=list)
    character_ids: List[int] = Field(default_factory=list)
    gamble_ids: List[int] = Field(default_factory=list)


class GuideUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    content: Optional[str] = Field(default=None, min_length=1)
    arc_id: Optional[int] = None
    tag_ids: Optional[List[int]] = None
    character_ids: Optional[List[int]] = None
    gamble_ids: Optional[List[int]] = None


class GuideReject(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class GuideLikeResult(BaseModel):
    liked: bool
    like_count: int
