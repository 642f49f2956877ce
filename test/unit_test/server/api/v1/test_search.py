"""
Unit tests for the search endpoints.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def content(client: AsyncClient, moderator, auth_headers):
    headers = auth_headers(moderator)
    await client.post(
        "/api/v1/characters", json={"name": "Baku Madarame", "description": "The Lie Eater"}, headers=headers
    )
    await client.post("/api/v1/characters", json={"name": "Kaji Takaomi"}, headers=headers)
    await client.post("/api/v1/gambles", json={"name": "Baku's Bet", "rules": "Call or fold"}, headers=headers)
    await client.post("/api/v1/arcs", json={"name": "Tower", "description": "Baku climbs"}, headers=headers)
    await client.post(
        "/api/v1/events",
        json={"title": "Baku loses", "description": "A late reveal", "chapter_number": 400},
        headers=headers,
    )


class TestSearch:
    """Test ranked cross-entity search."""

    async def test_results_are_ranked(self, client: AsyncClient, content):
        response = await client.get("/api/v1/search", params={"query": "baku"})
        assert response.status_code == 200
        results = response.json()["results"]
        titles = [result["title"] for result in results]
        assert titles[:3] == ["Baku loses", "Baku Madarame", "Baku's Bet"]
        assert results[0]["score"] == 75
        assert results[-1] == {
            "id": results[-1]["id"],
            "type": "arcs",
            "title": "Tower",
            "description": "Baku climbs",
            "score": 25,
        }

    async def test_events_past_progress_are_hidden(self, client: AsyncClient, reader, auth_headers, content):
        response = await client.get("/api/v1/search", params={"query": "baku"}, headers=auth_headers(reader))
        assert "Baku loses" not in [result["title"] for result in response.json()["results"]]

    async def test_type_filter(self, client: AsyncClient, content):
        response = await client.get("/api/v1/search", params={"query": "baku", "type": "gambles"})
        assert [result["type"] for result in response.json()["results"]] == ["gambles"]

    async def test_pagination(self, client: AsyncClient, content):
        response = await client.get("/api/v1/search", params={"query": "baku", "limit": 2, "page": 2})
        data = response.json()
        assert data["total"] == 4
        assert data["total_pages"] == 2
        assert data["page"] == 2
        assert len(data["results"]) == 2

    async def test_blank_query(self, client: AsyncClient):
        response = await client.get("/api/v1/search", params={"query": "   "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Search query cannot be empty"

    async def test_limit_is_capped(self, client: AsyncClient):
        response = await client.get("/api/v1/search", params={"query": "baku", "limit": 51})
        assert response.status_code == 422


class TestSuggestionsAndCounts:
    """Test autocomplete suggestions and per-type counts."""

    async def test_suggestions(self, client: AsyncClient, content):
        response = await client.get("/api/v1/search/suggestions", params={"query": "ba"})
        assert response.json()["suggestions"] == ["Baku loses", "Baku Madarame", "Baku's Bet"]

    async def test_short_query_has_no_suggestions(self, client: AsyncClient, content):
        response = await client.get("/api/v1/search/suggestions", params={"query": "b"})
        assert response.json()["suggestions"] == []

    async def test_content_type_counts(self, client: AsyncClient, content):
        response = await client.get("/api/v1/search/content-types", params={"query": "baku"})
        assert response.json()["counts"] == {
            "chapters": 0,
            "characters": 1,
            "events": 1,
            "arcs": 1,
            "gambles": 1,
            "factions": 0,
        }

        response = await client.get("/api/v1/search/content-types")
        assert response.json()["counts"]["characters"] == 2


class TestSearchBeyondTwoHundredMatches:
    """Totals and ranking cover every match, not a sample."""

    async def test_exact_match_is_found_among_many(self, client: AsyncClient, session):
        from usogui_db.core.database.entities.characters import Character

        session.add_all([Character(name=f"Kaji {number:03d}") for number in range(205)])
        session.add(Character(name="Kaji"))
        await session.commit()

        response = await client.get("/api/v1/search", params={"query": "kaji", "type": "characters"})
        data = response.json()
        assert data["total"] == 206
        assert (data["results"][0]["title"], data["results"][0]["score"]) == ("Kaji", 100)
        assert data["results"][1]["title"] == "Kaji 000"
