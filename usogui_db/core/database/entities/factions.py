"""
Faction entity models.

This module contains the faction table and the character membership join,
which records the character's role and the chapter range of the membership.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class FactionBase(Base):
    """Base fields for a faction or organization."""

    name: str = Field(max_length=255, unique=True, index=True)
    description: Optional[str] = Field(default=None)


class Faction(FactionBase, table=True):
    """An organization or faction (e.g. Kakerou, Ideal).

    Table: factions
    """

    __tablename__ = "factions"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})


class CharacterFaction(Base, table=True):
    """Membership of a character in a faction.

    ``spoiler_chapter`` is the chapter from which the membership may be shown;
    when unset, ``start_chapter`` is used.

    Table: character_factions
    """

    __tablename__ = "character_factions"
    __table_args__ = (
        UniqueConstraint("character_id", "faction_id", name="uq_character_factions_pair"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    character_id: int = Field(foreign_key="characters.id", ondelete="CASCADE", index=True)
    faction_id: int = Field(foreign_key="factions.id", ondelete="CASCADE", index=True)
    role: Optional[str] = Field(default=None, max_length=255)
    start_chapter: Optional[int] = Field(default=None, ge=1)
    end_chapter: Optional[int] = Field(default=None, ge=1)
    spoiler_chapter: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
