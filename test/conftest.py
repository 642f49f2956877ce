from __future__ import annotations

import os
from pathlib import Path

import httpx
import pytest
from dotenv import load_dotenv

TEST_ROOT = Path(__file__).resolve().parent

# A local test/.env may override anything below except the database URL
load_dotenv(TEST_ROOT / ".env", override=False)

# Settings are read once at import time, so these must be set before
# anything under usogui_db is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("EXPOSE_AUTH_TOKENS", "true")
os.environ.setdefault("ENABLE_FILE_LOGGING", "false")
os.environ.setdefault("LOGFIRE_ENABLED", "false")

LOCAL_HOSTS = frozenset({"mock", "localhost", "127.0.0.1", "testserver"})


def _stays_local(client: httpx._client.BaseClient, url) -> bool:
    if isinstance(getattr(client, "_transport", None), httpx.MockTransport):
        return True
    target = str(url)
    if target.startswith("/"):
        return True
    return httpx.URL(target).host in LOCAL_HOSTS


@pytest.fixture(autouse=True)
def block_external_http(monkeypatch: pytest.MonkeyPatch):
    """Fail any test that would send a request off this machine."""
    sync_request = httpx.Client.request
    async_request = httpx.AsyncClient.request

    def guarded_sync(self, method, url, *args, **kwargs):
        if not _stays_local(self, url):
            raise RuntimeError(f"External HTTP blocked in tests: {url}")
        return sync_request(self, method, url, *args, **kwargs)

    async def guarded_async(self, method, url, *args, **kwargs):
        if not _stays_local(self, url):
            raise RuntimeError(f"External HTTP blocked in tests: {url}")
        return await async_request(self, method, url, *args, **kwargs)

    monkeypatch.setattr(httpx.Client, "request", guarded_sync)
    monkeypatch.setattr(httpx.AsyncClient, "request", guarded_async)
