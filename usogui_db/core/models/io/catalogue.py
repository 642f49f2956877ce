"""
Catalogue I/O models: series, volumes, chapters, arcs, factions and tags.

Each entity follows the same trio:

- ``XRead``: response body, built from the entity with ``from_attributes``
- ``XCreate``: request body for creation
- ``XUpdate``: partial update; only fields that are set are applied
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =====================================================================
# Series
# =====================================================================


class SeriesRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    order: int
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SeriesCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    order: int = Field(default=0)
    description: Optional[str] = None


class SeriesUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    order: Optional[int] = None
    description: Optional[str] = None


# =====================================================================
# Volumes
# =====================================================================


class VolumeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    number: int
    start_chapter: int
    end_chapter: int
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class VolumeCreate(BaseModel):
    number: int = Field(ge=1)
    start_chapter: int = Field(ge=1)
    end_chapter: int = Field(ge=1)
    description: Optional[str] = None


class VolumeUpdate(BaseModel):
    number: Optional[int] = Field(default=None, ge=1)
    start_chapter: Optional[int] = Field(default=None, ge=1)
    end_chapter: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None


# =====================================================================
# Chapters
# =====================================================================


class ChapterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    number: int
    title: Optional[str] = None
    summary: Optional[str] = None
    volume_id: Optional[int] = None
    series_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ChapterCreate(BaseModel):
    number: int = Field(ge=1)
    title: Optional[str] = Field(default=None, max_length=255)
    summary: Optional[str] = None
    volume_id: Optional[int] = None
    series_id: Optional[int] = None


class ChapterUpdate(BaseModel):
    number: Optional[int] = Field(default=None, ge=1)
    title: Optional[str] = Field(default=None, max_length=255)
    summary: Optional[str] = None
    volume_id: Optional[int] = None
    series_id: Optional[int] = None


# =====================================================================
# Arcs
# =====================================================================


class ArcRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    order: int
    description: Optional[str] = None
    start_chapter: Optional[int] = None
    end_chapter: Optional[int] = None
    series_id: Optional[int] = None
    parent_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ArcCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    order: int = Field(default=0)
    description: Optional[str] = None
    start_chapter: Optional[int] = Field(default=None, ge=1)
    end_chapter: Optional[int] = Field(default=None, ge=1)
    series_id: Optional[int] = None
    parent_id: Optional[int] = None

    @model_validator(mode="after")
    def _check_range(self) -> "ArcCreate":
        if self.start_chapter is not None and self.end_chapter is not None and self.end_chapter < self.start_chapter:
            raise ValueError("end_chapter must be greater than or equal to start_chapter")
        return self


class ArcUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    order: Optional[int] = None
    description: Optional[str] = None
    start_chapter: Optional[int] = Field(default=None, ge=1)
    end_chapter: Optional[int] = Field(default=None, ge=1)
    series_id: Optional[int] = None
    parent_id: Optional[int] = None


# =====================================================================
# Factions
# =====================================================================


class FactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FactionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class FactionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None


# =====================================================================
# Tags
# =====================================================================


class TagRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None


class TagUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = None
