"""
Unit tests for the translation endpoints and localized reads.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def baku(client: AsyncClient, moderator, auth_headers):
    response = await client.post(
        "/api/v1/characters",
        json={"name": "Baku Madarame", "description": "A gambler"},
        headers=auth_headers(moderator),
    )
    return response.json()


async def _translate(client, headers, entity_id, **translated):
    return await client.post(
        "/api/v1/translations/character",
        json={"entity_id": entity_id, "language": "ja", "translated": translated},
        headers=headers,
    )


class TestTranslationCrud:
    """Test creating, reading, updating and deleting translations."""

    async def test_create_and_get(self, client: AsyncClient, moderator, auth_headers, baku):
        response = await _translate(client, auth_headers(moderator), baku["id"], name="Madarame Baku")
        assert response.status_code == 201
        assert response.json()["translated"] == {"name": "Madarame Baku", "description": None}

        response = await client.get(f"/api/v1/translations/character/{baku['id']}/ja")
        assert response.status_code == 200
        assert response.json()["entity_type"] == "character"

        listed = await client.get(f"/api/v1/translations/character/{baku['id']}")
        assert len(listed.json()) == 1

    async def test_missing_translation(self, client: AsyncClient, baku):
        response = await client.get(f"/api/v1/translations/character/{baku['id']}/ja")
        assert response.status_code == 404
        assert response.json()["detail"] == "Translation not found"

    async def test_unknown_field(self, client: AsyncClient, moderator, auth_headers, baku):
        response = await _translate(client, auth_headers(moderator), baku["id"], occupation="Gambler")
        assert response.status_code == 400
        assert "occupation" in response.json()["detail"]

    async def test_name_longer_than_column_is_rejected(self, client: AsyncClient, moderator, auth_headers, baku):
        headers = auth_headers(moderator)
        response = await _translate(client, headers, baku["id"], name="貘" * 300)
        assert response.status_code == 400
        assert response.json()["detail"] == "Translated name must be at most 255 characters"

        created = (await _translate(client, headers, baku["id"], name="貘" * 255)).json()
        response = await client.put(
            f"/api/v1/translations/character/{created['id']}",
            json={"translated": {"name": "x" * 256, "description": "y" * 5000}},
            headers=headers,
        )
        assert response.status_code == 400

    async def test_unknown_parent(self, client: AsyncClient, moderator, auth_headers):
        response = await _translate(client, auth_headers(moderator), 999, name="Nobody")
        assert response.status_code == 404
        assert response.json()["detail"] == "Character 999 not found"

    async def test_duplicate_language(self, client: AsyncClient, moderator, auth_headers, baku):
        headers = auth_headers(moderator)
        await _translate(client, headers, baku["id"], name="Madarame Baku")
        response = await _translate(client, headers, baku["id"], name="Again")
        assert response.status_code == 409

    async def test_unknown_entity_type(self, client: AsyncClient, moderator, auth_headers):
        response = await client.post(
            "/api/v1/translations/volume",
            json={"entity_id": 1, "language": "ja", "translated": {}},
            headers=auth_headers(moderator),
        )
        assert response.status_code == 422

    async def test_reader_cannot_translate(self, client: AsyncClient, reader, auth_headers, baku):
        response = await _translate(client, auth_headers(reader), baku["id"], name="Madarame Baku")
        assert response.status_code == 403

    async def test_update_and_delete(self, client: AsyncClient, moderator, auth_headers, baku):
        headers = auth_headers(moderator)
        created = (await _translate(client, headers, baku["id"], name="Madarame Baku")).json()
        url = f"/api/v1/translations/character/{created['id']}"

        response = await client.put(url, json={"translated": {"description": "Usogui"}}, headers=headers)
        assert response.status_code == 200
        assert response.json()["translated"] == {"name": "Madarame Baku", "description": "Usogui"}

        response = await client.delete(url, headers=headers)
        assert response.json()["message"] == "Translation deleted"
        assert (await client.delete(url, headers=headers)).status_code == 404


class TestLocalizedReads:
    """Test the ``lang`` parameter on content reads."""

    async def test_translated_fields_replace_base_text(self, client: AsyncClient, moderator, auth_headers, baku):
        await _translate(client, auth_headers(moderator), baku["id"], name="Madarame Baku")

        response = await client.get(f"/api/v1/characters/{baku['id']}", params={"lang": "ja"})
        assert response.json()["name"] == "Madarame Baku"
        # Empty translated values keep the base text
        assert response.json()["description"] == "A gambler"

        response = await client.get(f"/api/v1/characters/{baku['id']}")
        assert response.json()["name"] == "Baku Madarame"

    async def test_listing_is_localized(self, client: AsyncClient, moderator, auth_headers, baku):
        await _translate(client, auth_headers(moderator), baku["id"], name="Madarame Baku")
        response = await client.get("/api/v1/characters", params={"lang": "ja"})
        assert [character["name"] for character in response.json()["data"]] == ["Madarame Baku"]


class TestTranslationStats:
    """Test coverage statistics."""

    async def test_coverage(self, client: AsyncClient, moderator, auth_headers, baku):
        headers = auth_headers(moderator)
        await client.post("/api/v1/factions", json={"name": "Kakerou"}, headers=headers)
        await _translate(client, headers, baku["id"], name="Madarame Baku")

        response = await client.get("/api/v1/translations/stats")
        assert response.status_code == 200
        stats = response.json()
        assert stats["total_entities"] == 2
        assert stats["translated_entities"] == {"en": 0, "ja": 1}
        assert stats["coverage_percentage"] == {"en": 0, "ja": 50}
        assert stats["by_entity_type"]["character"] == {"total_entities": 1, "translated_entities": {"en": 0, "ja": 1}}
