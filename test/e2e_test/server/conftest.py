"""Fixtures for end-to-end API tests.

The app runs against a SQLite file with a fresh session per request, the
way it does in development.
"""

from typing import AsyncGenerator
from unittest.mock import patch

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from usogui_db.core.database import create_all, create_engine, create_sessionmaker, get_session
from usogui_db.core.database.entities.users import User
from usogui_db.core.models.domain import UserRole
from usogui_db.server.main import app
from usogui_db.server.services.security import hash_password

ADMIN_PASSWORD = "admin-password-1"


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'usogui.db'}")
    await create_all(engine)
    yield create_sessionmaker(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def api(session_maker) -> AsyncGenerator[AsyncClient, None]:
    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    async def no_lifespan(app):
        yield

    app.dependency_overrides[get_session] = get_session_override
    with patch("usogui_db.server.main.lifespan", no_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_token(api, session_maker) -> str:
    async with session_maker() as session:
        session.add(
            User(
                username="ikki",
                email="ikki@usogui-fans.net",
                password_hash=hash_password(ADMIN_PASSWORD),
                role=UserRole.admin,
                is_email_verified=True,
                user_progress=539,
            )
        )
        await session.commit()
    response = await api.post("/api/v1/auth/login", json={"username": "ikki", "password": ADMIN_PASSWORD})
    return response.json()["access_token"]
