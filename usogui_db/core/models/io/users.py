"""
User and authentication I/O models.

``UserRead`` never exposes credentials or tokens; ``UserPublic`` is the
reduced profile visible to anonymous visitors.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from usogui_db.core.models.domain import UserRole


class UserRead(BaseModel):
    """Schema for reading an account (self or admin view)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: UserRole
    is_email_verified: bool
    user_progress: int
    created_at: datetime
    updated_at: datetime


class UserPublic(BaseModel):
    """Publicly visible profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: UserRole
    created_at: datetime


class UserAdminUpdate(BaseModel):
    """Fields an admin may change on any account."""

    role: Optional[UserRole] = None
    is_email_verified: Optional[bool] = None
    user_progress: Optional[int] = Field(default=None, ge=1)


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own account."""

    username: Optional[str] = Field(default=None, min_length=3, max_length=64)
    email: Optional[EmailStr] = None


class ProgressRead(BaseModel):
    user_progress: int
    username: str


class ProgressUpdate(BaseModel):
    user_progress: int = Field(description="Highest chapter the reader has finished")


class RegisterRequest(BaseModel):
    """Schema for creating an account."""

    username: str = Field(min_length=3, max_length=64)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)


class RegisterResponse(BaseModel):
    message: str
    user: UserRead
    verification_token: Optional[str] = Field(
        default=None, description="Only returned when token exposure is enabled"
    )


class LoginRequest(BaseModel):
    """Login with a username or an email address."""

    username: str = Field(description="Username or email address")
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetRequested(BaseModel):
    message: str
    reset_token: Optional[str] = Field(default=None, description="Only returned when token exposure is enabled")


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str = Field(min_length=8, max_length=128)
