"""
Cross-entity search.

Each content type is filtered with a case-insensitive substring match and
scored in SQL with a ``CASE`` expression, so totals and ranking cover every
match rather than a sample. Only the score tiers that overlap the requested
page are loaded; inside a tier results are ordered by title. Chapters and
events honour the reader's spoiler progress.

Scores:
    100  title (or alias / chapter number) equals the query
     75  it starts with the query
     50  it contains the query
     25  only another searched column matched
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import String, case, cast, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from usogui_db.core.database.entities.arcs import Arc
from usogui_db.core.database.entities.chapters import Chapter
from usogui_db.core.database.entities.characters import Character
from usogui_db.core.database.entities.events import Event
from usogui_db.core.database.entities.factions import Faction
from usogui_db.core.database.entities.gambles import Gamble
from usogui_db.core.database.repositories.base import QueryBuilder
from usogui_db.core.database.repositories.events import EVENT_GATE
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import SearchType
from usogui_db.core.models.io.search import SearchResponse, SearchResult

logger = get_logger(__name__)

EXACT, PREFIX, CONTAINS, OTHER = 100, 75, 50, 25
SCORE_TIERS = (EXACT, PREFIX, CONTAINS, OTHER)

MAX_SUGGESTIONS = 10
MIN_SUGGESTION_LENGTH = 2
# Results scanned for distinct suggestion titles
SUGGESTION_POOL = 50


def _like_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def match_score(names: Sequence[Any], query: str, aliases: Optional[Any] = None):
    """SQL expression scoring a row against ``query``.

    Args:
        names: Title-like columns compared case-insensitively
        query: Stripped search text
        aliases: Optional JSON list column whose elements count as names

    Returns:
        A ``CASE`` expression yielding one of ``SCORE_TIERS``
    """
    needle = _like_literal(query.lower())
    lowered = [func.lower(column) for column in names]
    exact = [column == query.lower() for column in lowered]
    prefix = [column.like(f"{needle}%", escape="\\") for column in lowered]
    contains = [column.like(f"%{needle}%", escape="\\") for column in lowered]
    if aliases is not None:
        # Elements of the serialized list are quoted: ["Usogui", "斑目貘"]
        encoded = func.lower(cast(aliases, String))
        exact.append(encoded.like(f'%"{needle}"%', escape="\\"))
        prefix.append(encoded.like(f'%"{needle}%', escape="\\"))
        contains.append(encoded.like(f"%{needle}%", escape="\\"))
    return case(
        (or_(*exact), EXACT),
        (or_(*prefix), PREFIX),
        (or_(*contains), CONTAINS),
        else_=OTHER,
    )


def _chapter_title(chapter: Chapter) -> str:
    return f"Chapter {chapter.number}: {chapter.title}" if chapter.title else f"Chapter {chapter.number}"


@dataclass(frozen=True)
class _Source:
    """How one content type is queried, scored and rendered."""

    type: SearchType
    model: Any
    columns: Callable[[], Sequence[Any]]
    names: Callable[[], Sequence[Any]]
    title: Callable[[Any], str]
    description: Callable[[Any], Optional[str]]
    aliases: Optional[Callable[[], Any]] = None
    gate: Optional[Any] = None

    def score(self, query: str):
        return match_score(self.names(), query, self.aliases() if self.aliases else None)


SOURCES: Dict[SearchType, _Source] = {
    SearchType.chapters: _Source(
        type=SearchType.chapters,
        model=Chapter,
        columns=lambda: [Chapter.title, Chapter.summary, cast(Chapter.number, String)],
        names=lambda: [Chapter.title, cast(Chapter.number, String)],
        title=_chapter_title,
        description=lambda chapter: chapter.summary,
        gate=Chapter.number,
    ),
    SearchType.characters: _Source(
        type=SearchType.characters,
        model=Character,
        columns=lambda: [Character.name, cast(Character.alternate_names, String)],
        names=lambda: [Character.name],
        title=lambda character: character.name,
        description=lambda character: character.description,
        aliases=lambda: Character.alternate_names,
    ),
    SearchType.events: _Source(
        type=SearchType.events,
        model=Event,
        columns=lambda: [Event.title, Event.description],
        names=lambda: [Event.title],
        title=lambda event: event.title,
        description=lambda event: event.description,
        gate=EVENT_GATE,
    ),
    SearchType.arcs: _Source(
        type=SearchType.arcs,
        model=Arc,
        columns=lambda: [Arc.name, Arc.description],
        names=lambda: [Arc.name],
        title=lambda arc: arc.name,
        description=lambda arc: arc.description,
    ),
    SearchType.gambles: _Source(
        type=SearchType.gambles,
        model=Gamble,
        columns=lambda: [Gamble.name, Gamble.description, Gamble.rules],
        names=lambda: [Gamble.name],
        title=lambda gamble: gamble.name,
        description=lambda gamble: gamble.description,
    ),
    SearchType.factions: _Source(
        type=SearchType.factions,
        model=Faction,
        columns=lambda: [Faction.name, Faction.description],
        names=lambda: [Faction.name],
        title=lambda faction: faction.name,
        description=lambda faction: faction.description,
    ),
}


class SearchService:
    """Search across chapters, characters, events, arcs, gambles and factions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _sources(search_type: SearchType) -> List[_Source]:
        if search_type == SearchType.all:
            return list(SOURCES.values())
        return [SOURCES[search_type]]

    def _statement(self, source: _Source, query: str, progress: Optional[int], *entities):
        stmt = select(*(entities or (source.model,)))
        stmt = QueryBuilder.apply_search(stmt, source.columns(), query)
        if source.gate is not None:
            stmt = QueryBuilder.apply_spoiler_gate(stmt, source.gate, progress)
        return stmt

    async def _tier_sizes(self, source: _Source, query: str, progress: Optional[int]) -> Dict[int, int]:
        scored = self._statement(source, query, progress, source.score(query).label("score")).subquery()
        stmt = select(scored.c.score, func.count()).group_by(scored.c.score)
        result = await self.session.execute(stmt)
        return {int(score): int(count) for score, count in result.all()}

    async def _tier_rows(self, source: _Source, query: str, progress: Optional[int], tier: int) -> List[Any]:
        stmt = self._statement(source, query, progress).where(source.score(query) == tier)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    def _to_result(source: _Source, row: Any, score: int) -> SearchResult:
        return SearchResult(
            id=row.id,
            type=source.type.value,
            title=source.title(row),
            description=source.description(row),
            score=score,
        )

    async def search(
        self,
        query: str,
        search_type: SearchType = SearchType.all,
        progress: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
    ) -> SearchResponse:
        """
        Run a ranked search.

        Args:
            query: Non-blank search text
            search_type: Restrict to one content type, or ``all``
            progress: Reader progress used to hide chapters and events
            page: Page number (1-based)
            limit: Page size

        Returns:
            The requested page of results, best matches first
        """
        query = query.strip()
        sources = self._sources(search_type)
        sizes = {source.type: await self._tier_sizes(source, query, progress) for source in sources}
        total = sum(sum(tiers.values()) for tiers in sizes.values())

        start, end = (page - 1) * limit, page * limit
        results: List[SearchResult] = []
        seen = 0
        for tier in SCORE_TIERS:
            size = sum(sizes[source.type].get(tier, 0) for source in sources)
            if size and seen < end and seen + size > start:
                results.extend(await self._tier_page(sources, sizes, query, progress, tier, start - seen, end - seen))
            seen += size

        logger.debug(
            f"Search '{query}' ({search_type.value}) matched {total} items",
            extra={"query": query, "type": search_type.value, "progress": progress},
        )
        return SearchResponse(
            results=results,
            total=total,
            page=page,
            per_page=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )

    async def _tier_page(
        self,
        sources: Iterable[_Source],
        sizes: Dict[SearchType, Dict[int, int]],
        query: str,
        progress: Optional[int],
        tier: int,
        start: int,
        end: int,
    ) -> List[SearchResult]:
        tier_results: List[SearchResult] = []
        for source in sources:
            if sizes[source.type].get(tier):
                rows = await self._tier_rows(source, query, progress, tier)
                tier_results.extend(self._to_result(source, row, tier) for row in rows)
        tier_results.sort(key=lambda result: (result.title.lower(), result.type, result.id))
        return tier_results[max(start, 0) : end]

    async def suggestions(self, query: str, progress: Optional[int] = None) -> List[str]:
        """Up to ten distinct titles for autocomplete; short queries yield nothing."""
        query = query.strip()
        if len(query) < MIN_SUGGESTION_LENGTH:
            return []
        response = await self.search(query, SearchType.all, progress, page=1, limit=SUGGESTION_POOL)
        suggestions: List[str] = []
        for result in response.results:
            if result.score >= CONTAINS and result.title not in suggestions:
                suggestions.append(result.title)
            if len(suggestions) == MAX_SUGGESTIONS:
                break
        return suggestions

    async def content_type_counts(self, query: Optional[str] = None, progress: Optional[int] = None) -> Dict[str, int]:
        """Number of items per content type, optionally limited to matches of ``query``."""
        counts: Dict[str, int] = {}
        for source in SOURCES.values():
            stmt = self._statement(source, query or "", progress)
            count_stmt = select(func.count()).select_from(stmt.subquery())
            result = await self.session.execute(count_stmt)
            counts[source.type.value] = int(result.scalar_one())
        return counts
