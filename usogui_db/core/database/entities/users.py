"""
User account entity models.

Accounts hold credentials, role, email verification and password reset state,
the currently valid refresh token, and the reader's chapter progress that
drives spoiler gating.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from usogui_db.core.models.domain import UserRole

from ..base import Base, utc_now


class UserBase(Base):
    """Base fields for user accounts."""

    username: str = Field(max_length=64, unique=True, index=True, description="Public display name")
    email: str = Field(max_length=255, unique=True, index=True, description="Login email address")
    role: UserRole = Field(default=UserRole.user, description="Account role")
    is_email_verified: bool = Field(default=False, description="Whether the email address was confirmed")
    user_progress: int = Field(default=1, ge=1, description="Highest chapter the reader has finished")


class User(UserBase, table=True):
    """Persistent user account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    password_hash: str = Field(description="bcrypt hash of the password")
    email_verification_token: Optional[str] = Field(default=None, index=True)
    password_reset_token: Optional[str] = Field(default=None, index=True)
    password_reset_expires: Optional[datetime] = Field(default=None)
    refresh_token: Optional[str] = Field(default=None, index=True)
    refresh_token_expires_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def is_moderator(self) -> bool:
        return self.role in (UserRole.moderator, UserRole.admin)

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username}, role={self.role})"
