"""Character relationship I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from usogui_db.core.models.domain import RelationshipType


class RelationshipRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    source_character_id: int
    target_character_id: int
    relationship_type: RelationshipType
    description: Optional[str] = None
    start_chapter: int
    end_chapter: Optional[int] = None
    spoiler_chapter: int
    created_at: datetime
    updated_at: datetime


class RelatedCharacterRead(RelationshipRead):
    """A relationship with the name of the character on the other end."""

    character_name: str


class CharacterRelationshipsRead(BaseModel):
    """Relationships of one character, split by direction."""

    outgoing: List[RelatedCharacterRead] = Field(default_factory=list)
    incoming: List[RelatedCharacterRead] = Field(default_factory=list)


class RelationshipCreate(BaseModel):
    """Create a relationship, and optionally its reverse."""

    source_character_id: int
    target_character_id: int
    relationship_type: RelationshipType
    description: Optional[str] = None
    start_chapter: int = Field(ge=1)
    end_chapter: Optional[int] = Field(default=None, ge=1)
    spoiler_chapter: Optional[int] = Field(default=None, ge=1, description="Defaults to start_chapter")
    reverse_relationship_type: Optional[RelationshipType] = Field(
        default=None, description="Also create the target-to-source row with this type"
    )
    reverse_description: Optional[str] = None


class RelationshipUpdate(BaseModel):
    source_character_id: Optional[int] = None
    target_character_id: Optional[int] = None
    relationship_type: Optional[RelationshipType] = None
    description: Optional[str] = None
    start_chapter: Optional[int] = Field(default=None, ge=1)
    end_chapter: Optional[int] = Field(default=None, ge=1)
    spoiler_chapter: Optional[int] = Field(default=None, ge=1)


class RelationshipCreated(BaseModel):
    primary: RelationshipRead
    reverse: Optional[RelationshipRead] = None
