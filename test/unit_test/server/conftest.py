from typing import AsyncGenerator, Callable, Dict
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlmodel.pool import StaticPool

from usogui_db.core.database.entities.users import User
from usogui_db.core.models.domain import UserRole

# In-memory SQLite; check_same_thread=False because aiosqlite runs in a worker thread
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh database engine with all tables for each test."""
    from usogui_db.core.database import create_all, create_engine

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async_session_maker = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session_maker() as session:  # type: ignore[attr-defined]
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from usogui_db.core.database import get_session
    from usogui_db.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("usogui_db.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(session: AsyncSession) -> Callable:
    """Factory creating verified accounts directly in the database."""
    from usogui_db.core.database.repositories.users import UserRepository
    from usogui_db.server.services.security import hash_password

    async def _make_user(
        username: str,
        role: UserRole = UserRole.user,
        user_progress: int = 1,
        password: str = DEFAULT_PASSWORD,
        verified: bool = True,
    ) -> User:
        return await UserRepository(session).create(
            User(
                username=username,
                email=f"{username.lower()}@usogui-fans.net",
                password_hash=hash_password(password),
                role=role,
                user_progress=user_progress,
                is_email_verified=verified,
            )
        )

    return _make_user


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Build a bearer header for ``user``."""
    from usogui_db.server.services.security import create_access_token

    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest_asyncio.fixture
async def reader(make_user) -> User:
    return await make_user("kaji", user_progress=50)


@pytest_asyncio.fixture
async def moderator(make_user) -> User:
    return await make_user("kiruma", role=UserRole.moderator, user_progress=539)


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user("ikki", role=UserRole.admin, user_progress=539)
