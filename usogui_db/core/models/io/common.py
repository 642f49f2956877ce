"""
Shared I/O models.

``Page`` is the envelope returned by every paginated listing.
"""

from __future__ import annotations

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

ItemType = TypeVar("ItemType")


class Page(BaseModel, Generic[ItemType]):
    """Paginated list envelope."""

    data: List[ItemType] = Field(description="Items on this page")
    total: int = Field(description="Total number of matching items")
    page: int = Field(description="Current page number (1-based)")
    per_page: int = Field(description="Page size")
    total_pages: int = Field(description="Number of pages for the current page size")

    @classmethod
    def build(cls, items: List[ItemType], total: int, page: int, per_page: int) -> "Page[ItemType]":
        return cls(
            data=items,
            total=total,
            page=page,
            per_page=per_page,
            total_pages=math.ceil(total / per_page) if per_page else 0,
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement message."""

    message: str
