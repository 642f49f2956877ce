"""
Character I/O models, including faction membership schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CharacterRead(BaseModel):
    """Schema for reading a character from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    alternate_names: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    first_appearance_chapter: Optional[int] = None
    notable_roles: List[str] = Field(default_factory=list)
    notable_games: List[str] = Field(default_factory=list)
    occupation: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CharacterCreate(BaseModel):
    """Schema for creating a character via API."""

    name: str = Field(min_length=1, max_length=255)
    alternate_names: List[str] = Field(default_factory=list, description="Nicknames and aliases")
    description: Optional[str] = None
    first_appearance_chapter: Optional[int] = Field(default=None, ge=1)
    notable_roles: List[str] = Field(default_factory=list)
    notable_games: List[str] = Field(default_factory=list)
    occupation: Optional[str] = Field(default=None, max_length=255)


class CharacterUpdate(BaseModel):
    """Schema for updating a character via API."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    alternate_names: Optional[List[str]] = None
    description: Optional[str] = None
    first_appearance_chapter: Optional[int] = Field(default=None, ge=1)
    notable_roles: Optional[List[str]] = None
    notable_games: Optional[List[str]] = None
    occupation: Optional[str] = Field(default=None, max_length=255)


class MembershipCreate(BaseModel):
    """Add a character to a faction."""

    faction_id: int
    role: Optional[str] = Field(default=None, max_length=255)
    start_chapter: Optional[int] = Field(default=None, ge=1)
    end_chapter: Optional[int] = Field(default=None, ge=1)
    spoiler_chapter: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = None


class MembershipRead(BaseModel):
    """A faction membership as seen from either side."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    character_id: int
    faction_id: int
    role: Optional[str] = None
    start_chapter: Optional[int] = None
    end_chapter: Optional[int] = None
    spoiler_chapter: Optional[int] = None
    notes: Optional[str] = None


class CharacterMembershipRead(MembershipRead):
    """Membership of a character, with the faction name."""

    faction_name: str


class FactionMemberRead(MembershipRead):
    """Membership in a faction, with the character name."""

    character_name: str
