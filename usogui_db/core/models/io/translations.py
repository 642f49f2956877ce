"""Translation I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field

from usogui_db.core.models.domain import Language


class TranslationRead(BaseModel):
    """A translation row; ``translated`` holds only the translated columns."""

    id: int
    entity_type: str
    entity_id: int
    language: Language
    translated: Dict[str, Optional[str]]
    created_at: datetime
    updated_at: datetime


class TranslationCreate(BaseModel):
    entity_id: int
    language: Language
    translated: Dict[str, Optional[str]] = Field(description="Translated values keyed by field name")


class TranslationUpdate(BaseModel):
    translated: Dict[str, Optional[str]]


class EntityTypeCoverage(BaseModel):
    total_entities: int
    translated_entities: Dict[str, int]


class TranslationStats(BaseModel):
    total_entities: int
    translated_entities: Dict[str, int] = Field(description="Entities with a translation, per language")
    coverage_percentage: Dict[str, int] = Field(description="Rounded coverage per language")
    by_entity_type: Dict[str, EntityTypeCoverage]
