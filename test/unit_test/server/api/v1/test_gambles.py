"""
Unit tests for the gamble endpoints: gambles, teams and rounds.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def cast(client: AsyncClient, moderator, auth_headers):
    headers = auth_headers(moderator)
    ids = {}
    for name in ("Baku Madarame", "Kaji Takaomi", "Hal", "Kiruma Souichi"):
        response = await client.post("/api/v1/characters", json={"name": name}, headers=headers)
        ids[name] = response.json()["id"]
    return ids


@pytest_asyncio.fixture
async def gamble(client: AsyncClient, moderator, auth_headers, cast):
    response = await client.post(
        "/api/v1/gambles",
        json={
            "name": "Protoporos",
            "rules": "Shoot the tower guards",
            "participant_ids": [cast["Baku Madarame"], cast["Hal"]],
        },
        headers=auth_headers(moderator),
    )
    assert response.status_code == 201
    return response.json()


class TestGambles:
    """Test gamble CRUD."""

    async def test_create_records_participants(self, gamble, cast):
        assert gamble["participant_ids"] == sorted([cast["Baku Madarame"], cast["Hal"]])

    async def test_create_with_unknown_chapter(self, client: AsyncClient, moderator, auth_headers):
        response = await client.post(
            "/api/v1/gambles",
            json={"name": "Nowhere", "rules": "None", "chapter_id": 999},
            headers=auth_headers(moderator),
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Chapter not found"

    async def test_reader_cannot_create(self, client: AsyncClient, reader, auth_headers):
        response = await client.post(
            "/api/v1/gambles", json={"name": "Mine", "rules": "None"}, headers=auth_headers(reader)
        )
        assert response.status_code == 403

    async def test_list_by_participant(self, client: AsyncClient, gamble, cast):
        response = await client.get("/api/v1/gambles", params={"character_id": cast["Hal"]})
        assert [item["name"] for item in response.json()["data"]] == ["Protoporos"]

        response = await client.get("/api/v1/gambles", params={"character_id": cast["Kaji Takaomi"]})
        assert response.json()["data"] == []

    async def test_update_participants(self, client: AsyncClient, moderator, auth_headers, gamble, cast):
        response = await client.put(
            f"/api/v1/gambles/{gamble['id']}",
            json={"participant_ids": [cast["Kaji Takaomi"]]},
            headers=auth_headers(moderator),
        )
        assert response.status_code == 200
        assert response.json()["participant_ids"] == [cast["Kaji Takaomi"]]
        assert response.json()["name"] == "Protoporos"

    async def test_detail_includes_teams_and_rounds(self, client: AsyncClient, moderator, auth_headers, gamble, cast):
        headers = auth_headers(moderator)
        team = (
            await client.post(
                f"/api/v1/gambles/{gamble['id']}/teams",
                json={"name": "Baku", "members": [{"character_id": cast["Baku Madarame"], "role": "leader"}]},
                headers=headers,
            )
        ).json()
        await client.post(
            f"/api/v1/gambles/{gamble['id']}/rounds",
            json={"round_number": 1, "winner_team_id": team["id"], "outcome": "Baku escapes"},
            headers=headers,
        )

        response = await client.get(f"/api/v1/gambles/{gamble['id']}")
        assert response.status_code == 200
        detail = response.json()
        assert detail["teams"][0]["members"][0]["role"] == "leader"
        assert detail["rounds"][0]["winner_team_id"] == team["id"]

    async def test_delete(self, client: AsyncClient, moderator, auth_headers, gamble):
        url = f"/api/v1/gambles/{gamble['id']}"
        assert (await client.delete(url, headers=auth_headers(moderator))).status_code == 200
        assert (await client.get(url)).status_code == 404


class TestTeams:
    """Test gamble teams."""

    async def test_duplicate_member_is_rejected(self, client: AsyncClient, moderator, auth_headers, gamble, cast):
        member = {"character_id": cast["Baku Madarame"]}
        response = await client.post(
            f"/api/v1/gambles/{gamble['id']}/teams",
            json={"name": "Twice", "members": [member, member]},
            headers=auth_headers(moderator),
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "A character can only join a team once"

    async def test_unknown_supported_gambler(self, client: AsyncClient, moderator, auth_headers, gamble):
        response = await client.post(
            f"/api/v1/gambles/{gamble['id']}/teams",
            json={"name": "Ghosts", "supported_gambler_id": 777},
            headers=auth_headers(moderator),
        )
        assert response.status_code == 404

    async def test_delete_team_of_other_gamble(self, client: AsyncClient, moderator, auth_headers, gamble):
        headers = auth_headers(moderator)
        team = (
            await client.post(f"/api/v1/gambles/{gamble['id']}/teams", json={"name": "Solo"}, headers=headers)
        ).json()
        other = (await client.post("/api/v1/gambles", json={"name": "Other", "rules": "None"}, headers=headers)).json()

        response = await client.delete(f"/api/v1/gambles/{other['id']}/teams/{team['id']}", headers=headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Team not found"

        response = await client.delete(f"/api/v1/gambles/{gamble['id']}/teams/{team['id']}", headers=headers)
        assert response.status_code == 200
        assert (await client.get(f"/api/v1/gambles/{gamble['id']}/teams")).json() == []


class TestRounds:
    """Test gamble rounds."""

    async def test_duplicate_round_number(self, client: AsyncClient, moderator, auth_headers, gamble):
        headers = auth_headers(moderator)
        url = f"/api/v1/gambles/{gamble['id']}/rounds"
        assert (await client.post(url, json={"round_number": 1}, headers=headers)).status_code == 201

        response = await client.post(url, json={"round_number": 1}, headers=headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Round 1 already exists"

    async def test_winner_from_other_gamble(self, client: AsyncClient, moderator, auth_headers, gamble):
        headers = auth_headers(moderator)
        other = (await client.post("/api/v1/gambles", json={"name": "Other", "rules": "None"}, headers=headers)).json()
        foreign_team = (
            await client.post(f"/api/v1/gambles/{other['id']}/teams", json={"name": "Foreign"}, headers=headers)
        ).json()

        response = await client.post(
            f"/api/v1/gambles/{gamble['id']}/rounds",
            json={"round_number": 1, "winner_team_id": foreign_team["id"]},
            headers=headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Winner team does not belong to this gamble"

    async def test_rounds_are_ordered(self, client: AsyncClient, moderator, auth_headers, gamble):
        headers = auth_headers(moderator)
        url = f"/api/v1/gambles/{gamble['id']}/rounds"
        for number in (3, 1, 2):
            await client.post(url, json={"round_number": number}, headers=headers)

        response = await client.get(url)
        assert [round_["round_number"] for round_ in response.json()] == [1, 2, 3]
