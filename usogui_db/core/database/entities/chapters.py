"""Chapter entity model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class ChapterBase(Base):
    """Base fields for a chapter."""

    number: int = Field(ge=1, unique=True, index=True, description="Chapter number")
    title: Optional[str] = Field(default=None, max_length=255)
    summary: Optional[str] = Field(default=None)
    volume_id: Optional[int] = Field(default=None, foreign_key="volumes.id", ondelete="SET NULL", index=True)
    series_id: Optional[int] = Field(default=None, foreign_key="series.id", ondelete="SET NULL")


class Chapter(ChapterBase, table=True):
    """A single chapter.

    Table: chapters
    """

    __tablename__ = "chapters"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
