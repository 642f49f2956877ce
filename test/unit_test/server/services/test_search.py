"""Unit tests for SQL-side search scoring and the search service."""

import pytest
import pytest_asyncio

from usogui_db.core.database.entities.arcs import Arc
from usogui_db.core.database.entities.chapters import Chapter
from usogui_db.core.database.entities.characters import Character
from usogui_db.core.models.domain import SearchType
from usogui_db.server.services.search import SearchService

pytestmark = pytest.mark.asyncio


class TestMatchScore:
    @pytest.mark.parametrize(
        "name, query, expected",
        [
            ("Baku", "baku", 100),
            ("Baku Madarame", "BAKU", 75),
            ("Madarame Baku", "baku", 50),
            ("100% Bluff", "100%", 75),
        ],
    )
    async def test_name_tiers(self, session, name, query, expected):
        session.add(Character(name=name))
        await session.commit()

        response = await SearchService(session).search(query, SearchType.characters)
        assert [result.score for result in response.results] == [expected]

    async def test_underscore_is_literal_when_scoring(self, session):
        session.add_all([Character(name="Axb"), Character(name="A_b")])
        await session.commit()

        response = await SearchService(session).search("a_b", SearchType.characters)
        assert [(result.title, result.score) for result in response.results] == [("A_b", 100), ("Axb", 25)]


class TestSearchService:
    @pytest_asyncio.fixture
    async def service(self, session):
        session.add_all(
            [
                Character(name="Baku Madarame", alternate_names=["Usogui", "斑目貘"]),
                Chapter(number=1, title="Baku"),
                Chapter(number=300, title="Baku Returns"),
                Arc(name="Idol", description="Baku and Kaji"),
            ]
        )
        await session.commit()
        return SearchService(session)

    async def test_alias_match_scores_as_name(self, service):
        response = await service.search("usogui", SearchType.characters)
        assert [(result.title, result.score) for result in response.results] == [("Baku Madarame", 100)]

    async def test_japanese_alias(self, service):
        response = await service.search("斑目", SearchType.characters)
        assert [(result.title, result.score) for result in response.results] == [("Baku Madarame", 75)]

    async def test_progress_hides_late_chapters(self, service):
        response = await service.search("baku", SearchType.chapters, progress=50)
        assert [result.title for result in response.results] == ["Chapter 1: Baku"]

    async def test_chapter_number_matches_exactly(self, service):
        response = await service.search("300", SearchType.chapters)
        assert [(result.title, result.score) for result in response.results] == [("Chapter 300: Baku Returns", 100)]

    async def test_description_match_scores_lowest(self, service):
        response = await service.search("baku")
        assert response.results[-1].type == "arcs"
        assert response.results[-1].score == 25

    async def test_counts(self, service):
        counts = await service.content_type_counts("baku")
        assert counts["chapters"] == 2
        assert counts["characters"] == 1
        assert counts["factions"] == 0


class TestLargeResultSets:
    @pytest_asyncio.fixture
    async def service(self, session):
        session.add_all([Character(name=f"Kaji {number:03d}") for number in range(205)])
        session.add(Character(name="Kaji"))
        await session.commit()
        return SearchService(session)

    async def test_total_counts_every_match(self, service):
        response = await service.search("kaji", SearchType.characters, limit=20)
        assert response.total == 206
        assert response.total_pages == 11

    async def test_exact_match_with_highest_id_ranks_first(self, service):
        response = await service.search("kaji", SearchType.characters, limit=5)
        assert [(result.title, result.score) for result in response.results] == [
            ("Kaji", 100),
            ("Kaji 000", 75),
            ("Kaji 001", 75),
            ("Kaji 002", 75),
            ("Kaji 003", 75),
        ]

    async def test_last_page_reaches_the_end(self, service):
        response = await service.search("kaji", SearchType.characters, page=11, limit=20)
        assert [result.title for result in response.results] == [f"Kaji {number:03d}" for number in range(199, 205)]

    async def test_page_past_the_end_is_empty(self, service):
        response = await service.search("kaji", SearchType.characters, page=12, limit=20)
        assert response.results == []
        assert response.total == 206
