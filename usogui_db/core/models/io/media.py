"""Media I/O models, including the URL resolution result."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from usogui_db.core.models.domain import MediaOwnerType, MediaPurpose, MediaStatus, MediaType


class MediaRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    type: MediaType
    description: Optional[str] = None
    status: MediaStatus
    rejection_reason: Optional[str] = None
    owner_type: MediaOwnerType
    owner_id: int
    chapter_number: Optional[int] = None
    purpose: MediaPurpose
    submitted_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class MediaCreate(BaseModel):
    url: str = Field(min_length=1, max_length=2000)
    type: MediaType
    description: Optional[str] = None
    owner_type: MediaOwnerType
    owner_id: int
    chapter_number: Optional[int] = Field(default=None, ge=1)
    purpose: MediaPurpose = MediaPurpose.gallery


class MediaUpdate(BaseModel):
    description: Optional[str] = None
    chapter_number: Optional[int] = Field(default=None, ge=1)
    purpose: Optional[MediaPurpose] = None


class MediaReject(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class MediaResolveRequest(BaseModel):
    url: str = Field(min_length=1, max_length=2000)


class MediaResolution(BaseModel):
    """Best-effort metadata for an external media URL."""

    original_url: str
    platform: str
    direct_image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def has_image(self) -> bool:
        return bool(self.direct_image_url or self.thumbnail_url)
