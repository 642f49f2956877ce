"""Quote entity model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class QuoteBase(Base):
    """Base fields for a quote."""

    text: str = Field(description="The quoted line")
    chapter_number: int = Field(ge=1, index=True)
    page_number: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = Field(default=None, description="Context for the quote")
    character_id: int = Field(foreign_key="characters.id", ondelete="CASCADE", index=True)


class Quote(QuoteBase, table=True):
    """A memorable line spoken by a character.

    Table: quotes
    """

    __tablename__ = "quotes"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    submitted_by_id: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
