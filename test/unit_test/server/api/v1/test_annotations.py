"""
Unit tests for the annotation endpoints.

Covers submission, visibility of unapproved annotations, the author and
moderator edit rules, moderation and spoiler gating.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def baku(client: AsyncClient, moderator, auth_headers):
    response = await client.post("/api/v1/characters", json={"name": "Baku Madarame"}, headers=auth_headers(moderator))
    return response.json()


@pytest_asyncio.fixture
async def other_reader(make_user):
    return await make_user("marco", user_progress=50)


def _annotation(owner_id, **fields):
    return {"owner_type": "character", "owner_id": owner_id, "title": "Tell", "content": "He taps twice.", **fields}


async def _submit(client, headers, owner_id, **fields):
    response = await client.post("/api/v1/annotations", json=_annotation(owner_id, **fields), headers=headers)
    assert response.status_code == 201
    return response.json()


class TestAnnotationSubmission:
    """Test submitting annotations."""

    async def test_submission_is_pending(self, client: AsyncClient, reader, auth_headers, baku):
        data = await _submit(client, auth_headers(reader), baku["id"])
        assert data["status"] == "pending"
        assert data["author_id"] == reader.id

    async def test_moderator_submission_is_pending_too(self, client: AsyncClient, moderator, auth_headers, baku):
        data = await _submit(client, auth_headers(moderator), baku["id"])
        assert data["status"] == "pending"

    async def test_spoiler_needs_chapter(self, client: AsyncClient, reader, auth_headers, baku):
        response = await client.post(
            "/api/v1/annotations", json=_annotation(baku["id"], is_spoiler=True), headers=auth_headers(reader)
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "spoiler_chapter is required when is_spoiler is true"

    async def test_spoiler_chapter_dropped_without_flag(self, client: AsyncClient, reader, auth_headers, baku):
        data = await _submit(client, auth_headers(reader), baku["id"], spoiler_chapter=200)
        assert data["spoiler_chapter"] is None

    async def test_unknown_owner(self, client: AsyncClient, reader, auth_headers):
        response = await client.post(
            "/api/v1/annotations", json=_annotation(999, owner_type="gamble"), headers=auth_headers(reader)
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Gamble 999 not found"

    async def test_anonymous_cannot_submit(self, client: AsyncClient, baku):
        response = await client.post("/api/v1/annotations", json=_annotation(baku["id"]))
        assert response.status_code == 401


class TestAnnotationVisibility:
    """Test who can see unapproved annotations."""

    async def test_pending_is_hidden_from_others(
        self, client: AsyncClient, reader, other_reader, moderator, auth_headers, baku
    ):
        created = await _submit(client, auth_headers(reader), baku["id"])
        url = f"/api/v1/annotations/{created['id']}"

        assert (await client.get(url)).status_code == 404
        assert (await client.get(url, headers=auth_headers(other_reader))).status_code == 404
        assert (await client.get(url, headers=auth_headers(reader))).status_code == 200
        assert (await client.get(url, headers=auth_headers(moderator))).status_code == 200

    async def test_public_listing_only_shows_approved(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        pending = await _submit(client, auth_headers(reader), baku["id"], title="Pending")
        approved = await _submit(client, auth_headers(reader), baku["id"], title="Approved")
        await client.post(f"/api/v1/annotations/{approved['id']}/approve", headers=auth_headers(moderator))

        response = await client.get(
            "/api/v1/annotations", params={"owner_type": "character", "owner_id": baku["id"], "status": "all"}
        )
        assert [row["title"] for row in response.json()["data"]] == ["Approved"]

        response = await client.get(
            "/api/v1/annotations", params={"status": "pending"}, headers=auth_headers(moderator)
        )
        assert [row["id"] for row in response.json()["data"]] == [pending["id"]]

    async def test_spoilers_past_progress_are_hidden(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        created = await _submit(client, auth_headers(moderator), baku["id"], is_spoiler=True, spoiler_chapter=300)
        await client.post(f"/api/v1/annotations/{created['id']}/approve", headers=auth_headers(moderator))

        response = await client.get("/api/v1/annotations", headers=auth_headers(reader))
        assert response.json()["total"] == 0
        response = await client.get("/api/v1/annotations", params={"user_progress": 300})
        assert response.json()["total"] == 1

    async def test_mine_lists_every_status(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        first = await _submit(client, auth_headers(reader), baku["id"])
        await _submit(client, auth_headers(reader), baku["id"])
        await client.post(
            f"/api/v1/annotations/{first['id']}/reject", json={"reason": "Unsourced"}, headers=auth_headers(moderator)
        )

        response = await client.get("/api/v1/annotations/mine", headers=auth_headers(reader))
        assert sorted(row["status"] for row in response.json()["data"]) == ["pending", "rejected"]


class TestAnnotationEditing:
    """Test the author and moderator edit rules."""

    async def test_other_reader_cannot_edit(
        self, client: AsyncClient, reader, other_reader, moderator, auth_headers, baku
    ):
        created = await _submit(client, auth_headers(reader), baku["id"])
        await client.post(f"/api/v1/annotations/{created['id']}/approve", headers=auth_headers(moderator))

        response = await client.patch(
            f"/api/v1/annotations/{created['id']}", json={"title": "Mine now"}, headers=auth_headers(other_reader)
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "You can only edit your own annotations"

    async def test_author_cannot_edit_approved(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        created = await _submit(client, auth_headers(reader), baku["id"])
        await client.post(f"/api/v1/annotations/{created['id']}/approve", headers=auth_headers(moderator))

        url = f"/api/v1/annotations/{created['id']}"
        response = await client.patch(url, json={"title": "Edited"}, headers=auth_headers(reader))
        assert response.status_code == 403
        assert response.json()["detail"] == "Approved annotations cannot be edited"

        response = await client.patch(url, json={"title": "Edited"}, headers=auth_headers(moderator))
        assert response.json()["title"] == "Edited"
        assert response.json()["status"] == "approved"

    async def test_editing_rejected_resubmits(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        created = await _submit(client, auth_headers(reader), baku["id"])
        url = f"/api/v1/annotations/{created['id']}"
        await client.post(f"{url}/reject", json={"reason": "Needs a source"}, headers=auth_headers(moderator))

        response = await client.patch(
            url, json={"source_url": "https://usogui.fandom.com/wiki/Baku"}, headers=auth_headers(reader)
        )
        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert response.json()["rejection_reason"] is None

    async def test_spoiler_flag_on_update(self, client: AsyncClient, reader, auth_headers, baku):
        created = await _submit(client, auth_headers(reader), baku["id"])
        url = f"/api/v1/annotations/{created['id']}"
        headers = auth_headers(reader)

        response = await client.patch(url, json={"is_spoiler": True}, headers=headers)
        assert response.status_code == 400

        response = await client.patch(url, json={"is_spoiler": True, "spoiler_chapter": 120}, headers=headers)
        assert response.json()["spoiler_chapter"] == 120

        response = await client.patch(url, json={"is_spoiler": False}, headers=headers)
        assert response.json()["is_spoiler"] is False
        assert response.json()["spoiler_chapter"] is None

    async def test_delete_rules(self, client: AsyncClient, reader, other_reader, auth_headers, baku):
        created = await _submit(client, auth_headers(reader), baku["id"])
        url = f"/api/v1/annotations/{created['id']}"

        assert (await client.delete(url, headers=auth_headers(other_reader))).status_code == 404
        response = await client.delete(url, headers=auth_headers(reader))
        assert response.json()["message"] == "Annotation deleted"


class TestAnnotationModeration:
    """Test approving and rejecting annotations."""

    async def test_only_pending_can_be_moderated(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        created = await _submit(client, auth_headers(reader), baku["id"])
        url = f"/api/v1/annotations/{created['id']}"
        headers = auth_headers(moderator)

        response = await client.post(f"{url}/approve", headers=headers)
        assert response.json()["status"] == "approved"

        response = await client.post(f"{url}/approve", headers=headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Only pending annotations can be approved"

        response = await client.post(f"{url}/reject", json={"reason": "Late"}, headers=headers)
        assert response.json()["detail"] == "Only pending annotations can be rejected"

    async def test_reader_cannot_moderate(self, client: AsyncClient, reader, auth_headers, baku):
        created = await _submit(client, auth_headers(reader), baku["id"])
        response = await client.post(f"/api/v1/annotations/{created['id']}/approve", headers=auth_headers(reader))
        assert response.status_code == 403

    async def test_queue_and_count(self, client: AsyncClient, reader, moderator, auth_headers, baku):
        first = await _submit(client, auth_headers(reader), baku["id"], title="First")
        await _submit(client, auth_headers(reader), baku["id"], title="Second")
        headers = auth_headers(moderator)

        response = await client.get("/api/v1/annotations/pending/count", headers=headers)
        assert response.json() == {"count": 2}

        response = await client.get("/api/v1/annotations/pending", headers=headers)
        assert [row["title"] for row in response.json()["data"]] == ["First", "Second"]

        await client.post(f"/api/v1/annotations/{first['id']}/approve", headers=headers)
        response = await client.get("/api/v1/annotations/pending/count", headers=headers)
        assert response.json() == {"count": 1}
