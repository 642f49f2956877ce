"""Annotation I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from usogui_db.core.models.domain import AnnotationOwnerType, AnnotationStatus


class AnnotationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_type: AnnotationOwnerType
    owner_id: int
    title: str
    content: str
    source_url: Optional[str] = None
    chapter_reference: Optional[int] = None
    is_spoiler: bool
    spoiler_chapter: Optional[int] = None
    status: AnnotationStatus
    rejection_reason: Optional[str] = None
    author_id: int
    created_at: datetime
    updated_at: datetime


class AnnotationCreate(BaseModel):
    owner_type: AnnotationOwnerType
    owner_id: int
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    source_url: Optional[str] = Field(default=None, max_length=2000)
    chapter_reference: Optional[int] = Field(default=None, ge=1)
    is_spoiler: bool = False
    spoiler_chapter: Optional[int] = Field(default=None, ge=1, description="Required when is_spoiler is set")


class AnnotationUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    source_url: Optional[str] = Field(default=None, max_length=2000)
    chapter_reference: Optional[int] = Field(default=None, ge=1)
    is_spoiler: Optional[bool] = None
    spoiler_chapter: Optional[int] = Field(default=None, ge=1)


class AnnotationReject(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class PendingCount(BaseModel):
    count: int
