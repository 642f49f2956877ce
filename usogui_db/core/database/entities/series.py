"""Series entity model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class SeriesBase(Base):
    """Base fields for a series."""

    name: str = Field(max_length=255, unique=True, description="Series title")
    order: int = Field(default=0, description="Display order among series")
    description: Optional[str] = Field(default=None, description="Series synopsis")


class Series(SeriesBase, table=True):
    """A published series the catalogue covers.

    Table: series
    """

    __tablename__ = "series"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
