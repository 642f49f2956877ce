"""
Unit tests for the character and faction endpoints.

Covers the filtered character listing, related reads, and faction
memberships with their spoiler gating.
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _character(client, headers, name, **fields):
    response = await client.post("/api/v1/characters", json={"name": name, **fields}, headers=headers)
    assert response.status_code == 201
    return response.json()


async def _faction(client, headers, name):
    response = await client.post("/api/v1/factions", json={"name": name}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestCharacterListing:
    """Test the character listing filters and sorting."""

    async def test_name_search_matches_alternate_names(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        await _character(client, headers, "Baku Madarame", alternate_names=["Usogui", "Lie Eater"])
        await _character(client, headers, "Kaji Takaomi")

        response = await client.get("/api/v1/characters", params={"name": "lie eat"})
        assert [character["name"] for character in response.json()["data"]] == ["Baku Madarame"]

    async def test_name_search_matches_japanese_alias(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        await _character(client, headers, "Baku Madarame", alternate_names=["斑目貘"])
        await _character(client, headers, "Kaji Takaomi")

        response = await client.get("/api/v1/characters", params={"name": "斑目"})
        assert response.json()["total"] == 1
        assert response.json()["data"][0]["alternate_names"] == ["斑目貘"]

    async def test_sort_by_first_appearance_desc(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        await _character(client, headers, "Baku Madarame", first_appearance_chapter=1)
        await _character(client, headers, "Marco", first_appearance_chapter=40)
        await _character(client, headers, "Kaji Takaomi", first_appearance_chapter=2)

        response = await client.get(
            "/api/v1/characters", params={"sort": "first_appearance_chapter", "order": "desc"}
        )
        assert [character["name"] for character in response.json()["data"]] == [
            "Marco",
            "Kaji Takaomi",
            "Baku Madarame",
        ]

    async def test_invalid_sort_is_rejected(self, client: AsyncClient):
        response = await client.get("/api/v1/characters", params={"sort": "password"})
        assert response.status_code == 422

    async def test_filter_by_arc_first_appearance(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        arc = (
            await client.post(
                "/api/v1/arcs", json={"name": "Labyrinth", "start_chapter": 30, "end_chapter": 60}, headers=headers
            )
        ).json()
        await _character(client, headers, "Baku Madarame", first_appearance_chapter=1)
        await _character(client, headers, "Marco", first_appearance_chapter=40)

        response = await client.get("/api/v1/characters", params={"arc_id": arc["id"]})
        assert [character["name"] for character in response.json()["data"]] == ["Marco"]

    async def test_filter_by_faction(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        await _character(client, headers, "Kaji Takaomi")
        kakerou = await _faction(client, headers, "Kakerou")
        await client.post(
            f"/api/v1/characters/{baku['id']}/factions", json={"faction_id": kakerou["id"]}, headers=headers
        )

        response = await client.get("/api/v1/characters", params={"faction_id": kakerou["id"]})
        assert [character["name"] for character in response.json()["data"]] == ["Baku Madarame"]

    async def test_get_missing_character(self, client: AsyncClient):
        response = await client.get("/api/v1/characters/12345")
        assert response.status_code == 404
        assert response.json()["detail"] == "Character not found"


class TestCharacterRelations:
    """Test the related-content reads of a character."""

    async def test_events_are_gated(self, client: AsyncClient, moderator, reader, auth_headers):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        for title, chapter in (("Protoporos", 3), ("Air Poker", 500)):
            await client.post(
                "/api/v1/events",
                json={
                    "title": title,
                    "description": "...",
                    "chapter_number": chapter,
                    "character_ids": [baku["id"]],
                },
                headers=headers,
            )

        response = await client.get(f"/api/v1/characters/{baku['id']}/events", headers=auth_headers(reader))
        assert [event["title"] for event in response.json()] == ["Protoporos"]

    async def test_quotes_are_gated(self, client: AsyncClient, moderator, reader, auth_headers):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        for text, chapter in (("Early line", 10), ("Late line", 300)):
            await client.post(
                "/api/v1/quotes",
                json={"text": text, "chapter_number": chapter, "character_id": baku["id"]},
                headers=headers,
            )

        response = await client.get(f"/api/v1/characters/{baku['id']}/quotes", headers=auth_headers(reader))
        assert [quote["text"] for quote in response.json()] == ["Early line"]

    async def test_gambles_by_participation(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        await client.post(
            "/api/v1/gambles",
            json={"name": "Protoporos", "rules": "Escape the tower", "participant_ids": [baku["id"]]},
            headers=headers,
        )
        await client.post("/api/v1/gambles", json={"name": "Other", "rules": "None"}, headers=headers)

        response = await client.get(f"/api/v1/characters/{baku['id']}/gambles")
        assert [gamble["name"] for gamble in response.json()] == ["Protoporos"]


class TestFactionMemberships:
    """Test adding, reading and removing faction memberships."""

    async def test_add_membership(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        kakerou = await _faction(client, headers, "Kakerou")

        response = await client.post(
            f"/api/v1/characters/{baku['id']}/factions",
            json={"faction_id": kakerou["id"], "role": "Challenger", "start_chapter": 100},
            headers=headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["faction_name"] == "Kakerou"
        assert data["role"] == "Challenger"

    async def test_duplicate_membership(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        kakerou = await _faction(client, headers, "Kakerou")
        url = f"/api/v1/characters/{baku['id']}/factions"
        await client.post(url, json={"faction_id": kakerou["id"]}, headers=headers)

        response = await client.post(url, json={"faction_id": kakerou["id"]}, headers=headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Character is already a member of this faction"

    async def test_membership_with_inverted_range(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        kakerou = await _faction(client, headers, "Kakerou")
        response = await client.post(
            f"/api/v1/characters/{baku['id']}/factions",
            json={"faction_id": kakerou["id"], "start_chapter": 50, "end_chapter": 10},
            headers=headers,
        )
        assert response.status_code == 400

    async def test_membership_with_unknown_faction(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        response = await client.post(
            f"/api/v1/characters/{baku['id']}/factions", json={"faction_id": 999}, headers=headers
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Faction not found"

    async def test_memberships_are_gated_by_spoiler_chapter(
        self, client: AsyncClient, moderator, reader, auth_headers
    ):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        kakerou = await _faction(client, headers, "Kakerou")
        ideal = await _faction(client, headers, "Ideal")
        url = f"/api/v1/characters/{baku['id']}/factions"
        await client.post(url, json={"faction_id": kakerou["id"], "start_chapter": 20}, headers=headers)
        await client.post(
            url, json={"faction_id": ideal["id"], "start_chapter": 20, "spoiler_chapter": 400}, headers=headers
        )

        as_reader = await client.get(url, headers=auth_headers(reader))
        assert [membership["faction_name"] for membership in as_reader.json()] == ["Kakerou"]

        members = await client.get(f"/api/v1/factions/{ideal['id']}/members", headers=auth_headers(reader))
        assert members.json() == []

        members = await client.get(f"/api/v1/factions/{ideal['id']}/members")
        assert [member["character_name"] for member in members.json()] == ["Baku Madarame"]

    async def test_remove_membership(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        baku = await _character(client, headers, "Baku Madarame")
        kakerou = await _faction(client, headers, "Kakerou")
        await client.post(
            f"/api/v1/characters/{baku['id']}/factions", json={"faction_id": kakerou["id"]}, headers=headers
        )

        url = f"/api/v1/characters/{baku['id']}/factions/{kakerou['id']}"
        assert (await client.delete(url, headers=headers)).status_code == 200
        again = await client.delete(url, headers=headers)
        assert again.status_code == 404
        assert again.json()["detail"] == "Membership not found"


class TestFactions:
    """Test faction endpoints."""

    async def test_duplicate_faction_name(self, client: AsyncClient, moderator, auth_headers):
        headers = auth_headers(moderator)
        await _faction(client, headers, "Kakerou")
        response = await client.post("/api/v1/factions", json={"name": "Kakerou"}, headers=headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Faction with this name already exists"

    async def test_reader_cannot_create(self, client: AsyncClient, reader, auth_headers):
        response = await client.post("/api/v1/factions", json={"name": "Ideal"}, headers=auth_headers(reader))
        assert response.status_code == 403
