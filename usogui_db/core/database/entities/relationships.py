"""
Character relationship entity model.

A relationship is directed: it describes how the source character relates
to the target character from ``start_chapter`` on. The opposite direction is
a separate row, possibly with a different type (mentor / subordinate).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from usogui_db.core.models.domain import RelationshipType

from ..base import Base, utc_now


class CharacterRelationshipBase(Base):
    """Base fields for a directed character relationship."""

    source_character_id: int = Field(foreign_key="characters.id", ondelete="CASCADE", index=True)
    target_character_id: int = Field(foreign_key="characters.id", ondelete="CASCADE", index=True)
    relationship_type: RelationshipType = Field(description="Relationship as seen from the source")
    description: Optional[str] = Field(default=None)
    start_chapter: int = Field(ge=1, description="Chapter the relationship begins")
    end_chapter: Optional[int] = Field(default=None, ge=1)
    spoiler_chapter: int = Field(ge=1, index=True, description="Chapter from which the relationship may be shown")


class CharacterRelationship(CharacterRelationshipBase, table=True):
    """Table: character_relationships"""

    __tablename__ = "character_relationships"
    __table_args__ = (
        UniqueConstraint(
            "source_character_id",
            "target_character_id",
            "start_chapter",
            name="uq_character_relationships_pair_start",
        ),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
