"""Tag entity model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class TagBase(Base):
    """Base fields for a tag."""

    name: str = Field(max_length=50, unique=True, index=True)
    description: Optional[str] = Field(default=None)


class Tag(TagBase, table=True):
    """A free-form label for events and guides.

    Table: tags
    """

    __tablename__ = "tags"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
