"""End-to-end test of a reader's path through the API.

A reader registers, verifies the email address, logs in, sets reading
progress and only sees content up to that chapter. Submitted media stays
hidden until an admin approves it.
"""

import pytest

pytestmark = pytest.mark.asyncio

PASSWORD = "kaji-reads-539"


async def _register_and_login(api):
    registered = await api.post(
        "/api/v1/auth/register",
        json={"username": "kaji", "email": "kaji@usogui-fans.net", "password": PASSWORD},
    )
    assert registered.status_code == 201

    unverified = await api.post("/api/v1/auth/login", json={"username": "kaji", "password": PASSWORD})
    assert unverified.status_code == 401

    token = registered.json()["verification_token"]
    verified = await api.get("/api/v1/auth/verify-email", params={"token": token})
    assert verified.status_code == 200

    login = await api.post("/api/v1/auth/login", json={"username": "KAJI@usogui-fans.net", "password": PASSWORD})
    assert login.status_code == 200
    return {"Authorization": f"Bearer {login.json()['access_token']}"}


async def test_reader_journey(api, admin_token):
    admin = {"Authorization": f"Bearer {admin_token}"}

    baku = (await api.post("/api/v1/characters", json={"name": "Baku Madarame"}, headers=admin)).json()
    for title, chapter in (("Hangman", 40), ("Tower of Karma", 300)):
        created = await api.post(
            "/api/v1/events",
            json={"title": title, "description": "-", "chapter_number": chapter, "character_ids": [baku["id"]]},
            headers=admin,
        )
        assert created.status_code == 201

    reader = await _register_and_login(api)

    progress = await api.put("/api/v1/users/me/progress", json={"user_progress": 50}, headers=reader)
    assert progress.json()["user_progress"] == 50

    events = await api.get("/api/v1/events", headers=reader)
    assert [event["title"] for event in events.json()["data"]] == ["Hangman"]

    search = await api.get("/api/v1/search", params={"query": "tower"}, headers=reader)
    assert search.json()["total"] == 0

    submitted = await api.post(
        "/api/v1/media",
        json={
            "url": "https://www.deviantart.com/fan/art/baku-1",
            "type": "image",
            "owner_type": "character",
            "owner_id": baku["id"],
        },
        headers=reader,
    )
    assert submitted.json()["status"] == "pending"
    assert (await api.get("/api/v1/media")).json()["total"] == 0

    approved = await api.post(f"/api/v1/media/{submitted.json()['id']}/approve", headers=admin)
    assert approved.json()["status"] == "approved"
    assert (await api.get("/api/v1/media")).json()["total"] == 1


async def test_refresh_and_logout(api):
    await _register_and_login(api)

    refreshed = await api.post("/api/v1/auth/refresh")
    assert refreshed.status_code == 200
    assert refreshed.json()["user"]["username"] == "kaji"

    logout = await api.post("/api/v1/auth/logout")
    assert logout.json()["message"] == "Logged out"

    again = await api.post("/api/v1/auth/refresh")
    assert again.status_code == 401
