"""Search I/O models."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel


class SearchResult(BaseModel):
    id: int
    type: str
    title: str
    description: Optional[str] = None
    score: int


class SearchResponse(BaseModel):
    results: List[SearchResult]
    total: int
    page: int
    per_page: int
    total_pages: int


class SearchSuggestions(BaseModel):
    suggestions: List[str]


class ContentTypeCounts(BaseModel):
    counts: Dict[str, int]
