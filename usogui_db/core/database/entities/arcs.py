"""Story arc entity model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class ArcBase(Base):
    """Base fields for a story arc."""

    name: str = Field(max_length=255, index=True)
    order: int = Field(default=0, description="Reading order of the arc")
    description: Optional[str] = Field(default=None)
    start_chapter: Optional[int] = Field(default=None, ge=1)
    end_chapter: Optional[int] = Field(default=None, ge=1)
    series_id: Optional[int] = Field(default=None, foreign_key="series.id", ondelete="SET NULL")
    parent_id: Optional[int] = Field(
        default=None, foreign_key="arcs.id", ondelete="SET NULL", description="Enclosing arc for sub-arcs"
    )


class Arc(ArcBase, table=True):
    """A story arc covering a chapter range.

    Table: arcs
    """

    __tablename__ = "arcs"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
