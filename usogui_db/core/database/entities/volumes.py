"""Volume entity model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class VolumeBase(Base):
    """Base fields for a tankōbon volume."""

    number: int = Field(ge=1, unique=True, index=True, description="Volume number")
    start_chapter: int = Field(ge=1, description="First chapter collected in the volume")
    end_chapter: int = Field(ge=1, description="Last chapter collected in the volume")
    description: Optional[str] = Field(default=None)


class Volume(VolumeBase, table=True):
    """A collected volume spanning a contiguous chapter range.

    Table: volumes
    """

    __tablename__ = "volumes"
    __table_args__ = (
        CheckConstraint("end_chapter >= start_chapter", name="ck_volumes_chapter_range"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def contains_chapter(self, chapter_number: int) -> bool:
        return self.start_chapter <= chapter_number <= self.end_chapter
