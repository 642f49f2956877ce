"""
Search Endpoints.

One ranked search across chapters, characters, events, arcs, gambles and
factions, plus autocomplete suggestions and per-type counts. Chapters and
events past the reader's progress are left out.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from usogui_db.core.models.domain import SearchType
from usogui_db.core.models.io.search import ContentTypeCounts, SearchResponse, SearchSuggestions
from usogui_db.server.services.deps import ProgressDep, SessionDep
from usogui_db.server.services.search import SearchService

router = APIRouter()


@router.get(
    "",
    response_model=SearchResponse,
    summary="Search",
    description="Search all content types, or one with `type`. Results are ranked: exact title matches first, "
    "then prefix, then substring matches, then matches in other text.",
    responses={400: {"description": "Empty query"}},
)
async def search(
    session: SessionDep,
    progress: ProgressDep,
    query: str = Query(description="Search text"),
    type: SearchType = Query(default=SearchType.all, description="Content type to search"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=50),
) -> SearchResponse:
    if not query.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Search query cannot be empty")
    return await SearchService(session).search(query, type, progress, page=page, limit=limit)


@router.get(
    "/suggestions",
    response_model=SearchSuggestions,
    summary="Search Suggestions",
    description="Up to ten titles for autocomplete. Queries shorter than two characters return nothing.",
)
async def suggestions(
    session: SessionDep, progress: ProgressDep, query: str = Query(default="")
) -> SearchSuggestions:
    return SearchSuggestions(suggestions=await SearchService(session).suggestions(query, progress))


@router.get(
    "/content-types",
    response_model=ContentTypeCounts,
    summary="Content Type Counts",
    description="Number of items per content type, optionally limited to those matching `query`.",
)
async def content_types(
    session: SessionDep, progress: ProgressDep, query: Optional[str] = None
) -> ContentTypeCounts:
    counts = await SearchService(session).content_type_counts(query.strip() if query else None, progress)
    return ContentTypeCounts(counts=counts)
