"""
Media entity model.

Media rows reference external URLs (artwork, videos, audio) and belong to an
owner entity through the polymorphic ``owner_type`` / ``owner_id`` pair.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Index
from sqlmodel import Field

from usogui_db.core.models.domain import MediaOwnerType, MediaPurpose, MediaStatus, MediaType

from ..base import Base, utc_now


class MediaBase(Base):
    """Base fields for a media submission."""

    url: str = Field(max_length=2000, unique=True, description="Normalized external URL")
    type: MediaType = Field(description="image, video or audio")
    description: Optional[str] = Field(default=None)
    owner_type: MediaOwnerType = Field(description="Kind of entity the media belongs to")
    owner_id: int = Field(description="Identifier of the owning entity")
    chapter_number: Optional[int] = Field(default=None, ge=1, description="Chapter the media depicts")
    purpose: MediaPurpose = Field(default=MediaPurpose.gallery)


class Media(MediaBase, table=True):
    """A moderated media submission.

    Table: media
    """

    __tablename__ = "media"
    __table_args__ = (
        Index("ix_media_owner", "owner_type", "owner_id"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    status: MediaStatus = Field(default=MediaStatus.pending, index=True)
    rejection_reason: Optional[str] = Field(default=None, max_length=500)
    submitted_by_id: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
