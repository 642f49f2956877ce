"""Quote I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class QuoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    chapter_number: int
    page_number: Optional[int] = None
    description: Optional[str] = None
    character_id: int
    submitted_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class QuoteCreate(BaseModel):
    text: str = Field(min_length=1)
    chapter_number: int = Field(ge=1)
    page_number: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None
    character_id: int


class QuoteUpdate(BaseModel):
    text: Optional[str] = Field(default=None, min_length=1)
    chapter_number: Optional[int] = Field(default=None, ge=1)
    page_number: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None
    character_id: Optional[int] = None
