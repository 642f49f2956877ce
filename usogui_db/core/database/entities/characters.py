"""
Character entity models.

List-valued attributes (aliases, notable roles and games) are stored as JSON
columns; faction membership lives in ``character_factions``.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, utc_now


class CharacterBase(Base):
    """Base fields for a character."""

    name: str = Field(max_length=255, index=True)
    description: Optional[str] = Field(default=None)
    first_appearance_chapter: Optional[int] = Field(default=None, ge=1)
    occupation: Optional[str] = Field(default=None, max_length=255)


class Character(CharacterBase, table=True):
    """A character appearing in the series.

    Table: characters
    """

    __tablename__ = "characters"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    alternate_names: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False, default=list))
    notable_roles: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False, default=list))
    notable_games: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False, default=list))

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def matches_name(self, query: str) -> bool:
        """Case-insensitive substring match on the name and every alias."""
        needle = query.lower()
        return needle in self.name.lower() or any(needle in alias.lower() for alias in self.alternate_names or [])
