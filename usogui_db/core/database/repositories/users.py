"""
User repository.

Provides account lookups used by authentication (login identifier, email
verification, password reset and refresh tokens) and admin listing.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from usogui_db.core.models.domain import UserRole

from ..entities.users import User
from .base import QueryBuilder, SQLModelRepository


class UserRepository(SQLModelRepository[User]):
    """Repository for user account data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def _first(self, stmt) -> Optional[User]:
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_username(self, username: str) -> Optional[User]:
        return await self._first(select(User).where(func.lower(User.username) == username.lower()))

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._first(select(User).where(func.lower(User.email) == email.lower()))

    async def get_by_login(self, identifier: str) -> Optional[User]:
        """Find a user by username or email (case-insensitive).

        Args:
            identifier: Username or email address entered at login
        """
        needle = identifier.strip().lower()
        stmt = select(User).where(or_(func.lower(User.username) == needle, func.lower(User.email) == needle))
        return await self._first(stmt)

    async def get_by_verification_token(self, token: str) -> Optional[User]:
        return await self._first(select(User).where(User.email_verification_token == token))

    async def get_by_reset_token(self, token: str) -> Optional[User]:
        return await self._first(select(User).where(User.password_reset_token == token))

    async def get_by_refresh_token(self, token: str) -> Optional[User]:
        return await self._first(select(User).where(User.refresh_token == token))

    async def search(
        self,
        *,
        query: Optional[str] = None,
        role: Optional[UserRole] = None,
        limit: int,
        offset: int,
    ) -> Tuple[List[User], int]:
        """List users filtered by role and username/email substring.

        Returns:
            Tuple of (page of users, total matches)
        """
        stmt = select(User).order_by(User.username)
        if role is not None:
            stmt = stmt.where(User.role == role)
        stmt = QueryBuilder.apply_search(stmt, [User.username, User.email], query)
        return await self.fetch_page(stmt, limit, offset)
