"""Unit tests for the API dependencies.

Tests verify token resolution, role guards and the spoiler progress
dependency using a mocked database session.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from usogui_db.core.database.entities.users import User
from usogui_db.core.models.domain import UserRole
from usogui_db.server.services.deps import (
    AdminUser,
    ModeratorUser,
    get_current_user,
    get_optional_user,
    get_spoiler_progress,
    require_roles,
)
from usogui_db.server.services.security import create_access_token

pytestmark = pytest.mark.asyncio


def _user(role=UserRole.user, progress=50):
    return User(
        id=3, username="kaji", email="kaji@usogui-fans.net", password_hash="x", role=role, user_progress=progress
    )


def _credentials(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestCurrentUser:
    async def test_missing_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None, AsyncMock())
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Not authenticated"

    async def test_invalid_token(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_credentials("garbage"), AsyncMock())
        assert exc_info.value.detail == "Invalid or expired token"

    async def test_valid_token_loads_user(self):
        user = _user()
        with patch("usogui_db.server.services.deps.UserRepository") as repository_cls:
            repository_cls.return_value.get_by_id = AsyncMock(return_value=user)
            resolved = await get_current_user(_credentials(create_access_token(user)), AsyncMock())

        assert resolved is user
        repository_cls.return_value.get_by_id.assert_awaited_once_with(3)

    async def test_token_for_deleted_user(self):
        with patch("usogui_db.server.services.deps.UserRepository") as repository_cls:
            repository_cls.return_value.get_by_id = AsyncMock(return_value=None)
            with pytest.raises(HTTPException) as exc_info:
                await get_current_user(_credentials(create_access_token(_user())), AsyncMock())
        assert exc_info.value.status_code == 401

    async def test_optional_user(self):
        assert await get_optional_user(None, AsyncMock()) is None
        assert await get_optional_user(_credentials("garbage"), AsyncMock()) is None


class TestRoleGuards:
    async def test_guard_admits_listed_roles(self):
        guard = require_roles(UserRole.moderator, UserRole.admin)
        user = _user(UserRole.moderator)
        assert await guard(user) is user

    async def test_guard_rejects_other_roles(self):
        guard = require_roles(UserRole.admin)
        with pytest.raises(HTTPException) as exc_info:
            await guard(_user(UserRole.moderator))
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Insufficient permissions"

    async def test_annotated_dependencies(self):
        assert hasattr(ModeratorUser, "__metadata__")
        assert callable(AdminUser.__metadata__[0].dependency)


class TestSpoilerProgress:
    async def test_query_value_overrides_user(self):
        assert await get_spoiler_progress(_user(progress=50), user_progress=10) == 10

    async def test_user_progress_is_default(self):
        assert await get_spoiler_progress(_user(progress=50), user_progress=None) == 50

    async def test_anonymous_without_value(self):
        assert await get_spoiler_progress(None, user_progress=None) is None
