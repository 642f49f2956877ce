"""
Pagination helpers.

``PageParams`` is a FastAPI dependency reading ``page`` and ``limit``;
``paginate`` wraps a page of items in the ``Page`` envelope and sets the
``X-Total-Count`` header.
"""

from __future__ import annotations

from typing import Annotated, Callable, List, Optional, TypeVar

from fastapi import Depends, Query, Response

from usogui_db.core.models.io.common import Page

T = TypeVar("T")

TOTAL_COUNT_HEADER = "X-Total-Count"


class PageParams:
    """Page number and size taken from the query string."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=20, ge=1, le=100, description="Items per page"),
    ) -> None:
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


PageDep = Annotated[PageParams, Depends()]


def paginate(
    response: Response,
    items: List,
    total: int,
    params: PageParams,
    transform: Optional[Callable[[object], T]] = None,
) -> Page:
    """Build the page envelope and set ``X-Total-Count`` on ``response``.

    Args:
        response: Response object injected by FastAPI
        items: Items on the current page
        total: Total number of matching items
        params: Page parameters of the request
        transform: Optional per-item conversion (e.g. ``XRead.model_validate``)
    """
    response.headers[TOTAL_COUNT_HEADER] = str(total)
    data = [transform(item) for item in items] if transform else list(items)
    return Page.build(data, total, params.page, params.limit)
