"""
Unit tests for the media endpoints.

Covers URL validation and normalization on submission, moderation, owner
checks, status visibility, thumbnails and URL resolution.
"""

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient

from usogui_db.server.main import app
from usogui_db.server.services.media_resolver import MediaUrlResolver, get_media_resolver

pytestmark = pytest.mark.asyncio

ARTWORK = "https://www.deviantart.com/someone/art/baku-madarame-123"


@pytest_asyncio.fixture
async def baku(client: AsyncClient, moderator, auth_headers):
    response = await client.post("/api/v1/characters", json={"name": "Baku Madarame"}, headers=auth_headers(moderator))
    return response.json()


def _media(owner_id, url=ARTWORK, **fields):
    return {"url": url, "type": "image", "owner_type": "character", "owner_id": owner_id, **fields}


class TestMediaSubmission:
    """Test submitting media links."""

    async def test_reader_submission_is_pending(self, client: AsyncClient, reader, auth_headers, baku):
        response = await client.post("/api/v1/media", json=_media(baku["id"]), headers=auth_headers(reader))
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["submitted_by_id"] == reader.id

    async def test_moderator_submission_is_approved(self, client: AsyncClient, moderator, auth_headers, baku):
        response = await client.post("/api/v1/media", json=_media(baku["id"]), headers=auth_headers(moderator))
        assert response.json()["status"] == "approved"

    async def test_video_url_is_normalized(self, client: AsyncClient, reader, auth_headers, baku):
        response = await client.post(
            "/api/v1/media",
            json=_media(baku["id"], url="https://youtu.be/dQw4w9WgXcQ", type="video"),
            headers=auth_headers(reader),
        )
        assert response.status_code == 201
        assert response.json()["url"] == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    async def test_duplicate_after_normalization(self, client: AsyncClient, reader, auth_headers, baku):
        headers = auth_headers(reader)
        await client.post(
            "/api/v1/media", json=_media(baku["id"], url="https://x.com/fan/status/1"), headers=headers
        )
        response = await client.post(
            "/api/v1/media", json=_media(baku["id"], url="https://twitter.com/fan/status/1"), headers=headers
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "This media URL has already been submitted"

    @pytest.mark.parametrize(
        "url, media_type, detail",
        [
            ("not a url", "image", "URL must be an absolute http(s) URL"),
            ("https://vimeo.com/1234", "video", "URL must be from YouTube"),
            ("https://www.instagram.com/someone/", "image", "Instagram URL must point to a post or reel"),
            (
                "https://example.com/page.html",
                "image",
                "URL must be from DeviantArt, Pixiv, Twitter/X, Instagram or a direct image link",
            ),
        ],
    )
    async def test_invalid_urls(self, client: AsyncClient, reader, auth_headers, baku, url, media_type, detail):
        response = await client.post(
            "/api/v1/media", json=_media(baku["id"], url=url, type=media_type), headers=auth_headers(reader)
        )
        assert response.status_code == 400
        assert response.json()["detail"] == detail

    async def test_unknown_owner(self, client: AsyncClient, reader, auth_headers):
        response = await client.post("/api/v1/media", json=_media(404), headers=auth_headers(reader))
        assert response.status_code == 404
        assert response.json()["detail"] == "Character 404 not found"

    async def test_anonymous_submission(self, client: AsyncClient, baku):
        response = await client.post("/api/v1/media", json=_media(baku["id"]))
        assert response.status_code == 401


class TestMediaVisibility:
    """Test which media each caller can see."""

    async def test_listing_defaults_to_approved(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        await client.post("/api/v1/media", json=_media(baku["id"]), headers=auth_headers(reader))
        await client.post(
            "/api/v1/media",
            json=_media(baku["id"], url="https://cdn.usogui-fans.net/baku.png"),
            headers=auth_headers(moderator),
        )

        public = await client.get("/api/v1/media")
        assert [media["status"] for media in public.json()["data"]] == ["approved"]

        forced = await client.get("/api/v1/media", params={"status": "pending"}, headers=auth_headers(reader))
        assert [media["status"] for media in forced.json()["data"]] == ["approved"]

        pending = await client.get("/api/v1/media", params={"status": "pending"}, headers=auth_headers(moderator))
        assert [media["status"] for media in pending.json()["data"]] == ["pending"]

        everything = await client.get("/api/v1/media", params={"status": "all"}, headers=auth_headers(moderator))
        assert everything.json()["total"] == 2

    async def test_listing_hides_media_past_progress(self, client: AsyncClient, moderator, reader, auth_headers, baku):
        headers = auth_headers(moderator)
        await client.post("/api/v1/media", json=_media(baku["id"], chapter_number=10), headers=headers)
        await client.post(
            "/api/v1/media",
            json=_media(baku["id"], url="https://cdn.usogui-fans.net/late.png", chapter_number=400),
            headers=headers,
        )

        response = await client.get("/api/v1/media", headers=auth_headers(reader))
        assert [media["chapter_number"] for media in response.json()["data"]] == [10]

    async def test_pending_media_hidden_from_strangers(
        self, client: AsyncClient, reader, make_user, auth_headers, baku
    ):
        created = (await client.post("/api/v1/media", json=_media(baku["id"]), headers=auth_headers(reader))).json()
        url = f"/api/v1/media/{created['id']}"
        stranger = await make_user("Marco")

        assert (await client.get(url)).status_code == 404
        assert (await client.get(url, headers=auth_headers(stranger))).status_code == 404
        assert (await client.get(url, headers=auth_headers(reader))).status_code == 200


class TestMediaModeration:
    """Test approve, reject, edit and delete."""

    async def test_approve_then_approve_again(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        created = (await client.post("/api/v1/media", json=_media(baku["id"]), headers=auth_headers(reader))).json()
        url = f"/api/v1/media/{created['id']}/approve"

        response = await client.post(url, headers=auth_headers(moderator))
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

        again = await client.post(url, headers=auth_headers(moderator))
        assert again.status_code == 400
        assert again.json()["detail"] == "This submission is not in pending state"

    async def test_reject_with_reason(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        created = (await client.post("/api/v1/media", json=_media(baku["id"]), headers=auth_headers(reader))).json()
        response = await client.post(
            f"/api/v1/media/{created['id']}/reject", json={"reason": "Wrong character"}, headers=auth_headers(moderator)
        )
        assert response.json()["status"] == "rejected"
        assert response.json()["rejection_reason"] == "Wrong character"

    async def test_reader_cannot_moderate(self, client: AsyncClient, reader, auth_headers, baku):
        created = (await client.post("/api/v1/media", json=_media(baku["id"]), headers=auth_headers(reader))).json()
        response = await client.post(f"/api/v1/media/{created['id']}/approve", headers=auth_headers(reader))
        assert response.status_code == 403

    async def test_only_submitter_can_edit_and_delete(
        self, client: AsyncClient, reader, make_user, auth_headers, baku
    ):
        created = (await client.post("/api/v1/media", json=_media(baku["id"]), headers=auth_headers(reader))).json()
        url = f"/api/v1/media/{created['id']}"
        stranger = await make_user("Marco")

        edit = await client.patch(url, json={"description": "Mine now"}, headers=auth_headers(stranger))
        assert edit.status_code == 403
        assert edit.json()["detail"] == "You can only edit your own submissions"

        delete = await client.delete(url, headers=auth_headers(stranger))
        assert delete.status_code == 403
        assert delete.json()["detail"] == "You can only delete your own submissions"

        edit = await client.patch(url, json={"description": "Cover art"}, headers=auth_headers(reader))
        assert edit.json()["description"] == "Cover art"

        delete = await client.delete(url, headers=auth_headers(reader))
        assert delete.json()["message"] == "Media deleted"


class TestThumbnail:
    """Test entity thumbnail selection."""

    async def test_prefers_latest_chapter_within_progress(
        self, client: AsyncClient, moderator, reader, auth_headers, baku
    ):
        headers = auth_headers(moderator)
        for name, chapter in (("early", 5), ("middle", 40), ("late", 300)):
            await client.post(
                "/api/v1/media",
                json=_media(
                    baku["id"],
                    url=f"https://cdn.usogui-fans.net/{name}.png",
                    chapter_number=chapter,
                    purpose="entity_display",
                ),
                headers=headers,
            )

        response = await client.get(f"/api/v1/media/thumbnail/character/{baku['id']}", headers=auth_headers(reader))
        assert response.status_code == 200
        assert response.json()["url"] == "https://cdn.usogui-fans.net/middle.png"

    async def test_gallery_media_is_not_a_thumbnail(self, client: AsyncClient, moderator, auth_headers, baku):
        await client.post("/api/v1/media", json=_media(baku["id"]), headers=auth_headers(moderator))
        response = await client.get(f"/api/v1/media/thumbnail/character/{baku['id']}")
        assert response.status_code == 404
        assert response.json()["detail"] == "No thumbnail found"


class TestResolve:
    """Test the URL resolution endpoint."""

    @pytest.fixture
    def resolver(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "url": "https://images.deviantart.net/baku.jpg",
                    "thumbnail_url": "https://images.deviantart.net/baku_thumb.jpg",
                    "title": "Baku",
                    "author_name": "someone",
                },
            )

        resolver = MediaUrlResolver(
            timeout=1.0,
            user_agent="usogui-db-test",
            cache_ttl=60,
            client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        app.dependency_overrides[get_media_resolver] = lambda: resolver
        yield resolver
        app.dependency_overrides.pop(get_media_resolver, None)

    async def test_resolves_deviantart(self, client: AsyncClient, resolver):
        response = await client.post("/api/v1/media/resolve", json={"url": ARTWORK})
        assert response.status_code == 200
        data = response.json()
        assert data["platform"] == "deviantart"
        assert data["direct_image_url"] == "https://images.deviantart.net/baku.jpg"
        assert data["author"] == "someone"

    async def test_direct_link(self, client: AsyncClient, resolver):
        response = await client.post("/api/v1/media/resolve", json={"url": "https://cdn.usogui-fans.net/baku.png"})
        assert response.json()["direct_image_url"] == "https://cdn.usogui-fans.net/baku.png"
