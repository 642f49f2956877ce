"""
Annotation entity model.

Reader-written notes attached to a character, gamble or arc through the
``owner_type`` / ``owner_id`` pair. Every annotation starts pending and is
shown publicly once a moderator approves it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Index
from sqlmodel import Field

from usogui_db.core.models.domain import AnnotationOwnerType, AnnotationStatus

from ..base import Base, utc_now


class AnnotationBase(Base):
    """Base fields for an annotation."""

    owner_type: AnnotationOwnerType = Field(description="Kind of entity the annotation belongs to")
    owner_id: int = Field(description="Identifier of the annotated entity")
    title: str = Field(max_length=255)
    content: str = Field(description="Annotation body")
    source_url: Optional[str] = Field(default=None, max_length=2000)
    chapter_reference: Optional[int] = Field(default=None, ge=1, index=True, description="Chapter the note cites")
    is_spoiler: bool = Field(default=False)
    spoiler_chapter: Optional[int] = Field(default=None, ge=1)


class Annotation(AnnotationBase, table=True):
    """A moderated reader annotation.

    Table: annotations
    """

    __tablename__ = "annotations"
    __table_args__ = (
        Index("ix_annotations_owner", "owner_type", "owner_id"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    status: AnnotationStatus = Field(default=AnnotationStatus.pending, index=True)
    rejection_reason: Optional[str] = Field(default=None, max_length=500)
    author_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
