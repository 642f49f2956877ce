"""
Authentication Endpoints.

Registration with email verification, login with username or email, access
token refresh through an HttpOnly refresh-token cookie, logout, and the
password reset flow.

There is no mail delivery: verification and reset tokens are logged, and
returned in the response when ``EXPOSE_AUTH_TOKENS`` is enabled (or the
address matches ``TEST_USER_EMAIL``).
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Cookie, HTTPException, Response, status

from usogui_db.core.database.base import utc_now
from usogui_db.core.database.entities.users import User
from usogui_db.core.database.repositories.users import UserRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.io.common import MessageResponse
from usogui_db.core.models.io.users import (
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetRequested,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserRead,
)
from usogui_db.core.monitoring import log_auth_event
from usogui_db.server.core.config import settings
from usogui_db.server.services.deps import CurrentUser, SessionDep
from usogui_db.server.services.security import (
    create_access_token,
    generate_token,
    hash_password,
    verify_password,
)

logger = get_logger(__name__)

router = APIRouter()

REFRESH_COOKIE = settings.auth.refresh_cookie_name


def _expose_token(email: str) -> bool:
    if settings.auth.expose_tokens:
        return True
    return bool(settings.test_user_email) and email.lower() == settings.test_user_email.lower()


def _set_refresh_cookie(response: Response, token: str) -> None:
    auth = settings.auth
    response.set_cookie(
        key=auth.refresh_cookie_name,
        value=token,
        max_age=auth.refresh_token_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=auth.refresh_cookie_secure,
        samesite="lax",
        path="/",
    )


def _clear_refresh_cookie(response: Response) -> None:
    auth = settings.auth
    response.delete_cookie(
        key=auth.refresh_cookie_name, path="/", httponly=True, secure=auth.refresh_cookie_secure, samesite="lax"
    )


async def _issue_tokens(repository: UserRepository, user: User, response: Response) -> TokenResponse:
    """Rotate the stored refresh token and return a fresh access token."""
    user.refresh_token = generate_token()
    user.refresh_token_expires_at = utc_now() + timedelta(days=settings.auth.refresh_token_expire_days)
    user = await repository.update(user)
    _set_refresh_cookie(response, user.refresh_token)
    return TokenResponse(access_token=create_access_token(user), user=UserRead.model_validate(user))


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Account",
    description="Create an unverified account. The email address must be verified before logging in.",
    response_description="The created account and, when exposure is enabled, its verification token.",
    responses={
        201: {"description": "Account created"},
        409: {"description": "Username or email already in use"},
    },
)
async def register(payload: RegisterRequest, session: SessionDep) -> RegisterResponse:
    """
    Register a new account.

    - **username**: Public display name (3-64 characters).
    - **email**: Login email address; receives the verification token.
    - **password**: At least 8 characters.
    """
    repository = UserRepository(session)
    if await repository.get_by_username(payload.username):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    if await repository.get_by_email(payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    token = generate_token()
    user = await repository.create(
        User(
            username=payload.username,
            email=payload.email,
            password_hash=hash_password(payload.password),
            email_verification_token=token,
        )
    )
    logger.info(
        f"Registered user {user.id} ({user.username}); email verification token: {token}",
        extra={"user_id": user.id},
    )
    log_auth_event("register", user_id=user.id, username=user.username)
    return RegisterResponse(
        message="Registration successful. Please verify your email address.",
        user=UserRead.model_validate(user),
        verification_token=token if _expose_token(user.email) else None,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log In",
    description="Exchange a username (or email) and password for an access token. Sets the refresh token cookie.",
    response_description="Access token and the logged-in account.",
    responses={
        200: {"description": "Logged in"},
        401: {"description": "Invalid credentials or unverified email"},
    },
)
async def login(payload: LoginRequest, response: Response, session: SessionDep) -> TokenResponse:
    """
    Log in with username or email.

    The refresh token is stored on the account and sent back as an HttpOnly cookie;
    a new login replaces any previously issued refresh token.
    """
    repository = UserRepository(session)
    user = await repository.get_by_login(payload.username)
    if user is None or not verify_password(payload.password, user.password_hash):
        log_auth_event("login_failed", username=payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_email_verified:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Email not verified")

    tokens = await _issue_tokens(repository, user, response)
    log_auth_event("login", user_id=user.id, username=user.username)
    return tokens


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh Access Token",
    description="Issue a new access token using the refresh token cookie. The refresh token is rotated.",
    response_description="New access token and the account.",
    responses={
        200: {"description": "Token refreshed"},
        401: {"description": "Missing, unknown or expired refresh token"},
    },
)
async def refresh(
    response: Response,
    session: SessionDep,
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
) -> TokenResponse:
    """Exchange the refresh token cookie for a new access token."""
    if not refresh_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No refresh token")

    repository = UserRepository(session)
    user = await repository.get_by_refresh_token(refresh_token)
    expires_at = user.refresh_token_expires_at if user else None
    if user is None or expires_at is None or expires_at < utc_now():
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    tokens = await _issue_tokens(repository, user, response)
    log_auth_event("refresh", user_id=user.id, username=user.username)
    return tokens


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log Out",
    description="Revoke the refresh token and clear its cookie. Safe to call repeatedly.",
    response_description="Confirmation message.",
)
async def logout(
    response: Response,
    session: SessionDep,
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
) -> MessageResponse:
    """Log out the session owning the refresh token cookie."""
    if refresh_token:
        repository = UserRepository(session)
        user = await repository.get_by_refresh_token(refresh_token)
        if user is not None:
            user.refresh_token = None
            user.refresh_token_expires_at = None
            await repository.update(user)
            log_auth_event("logout", user_id=user.id, username=user.username)
    _clear_refresh_cookie(response)
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_model=UserRead,
    summary="Current Account",
    description="Return the account of the bearer token.",
    response_description="The authenticated account.",
    responses={401: {"description": "Not authenticated"}},
)
async def me(user: CurrentUser) -> UserRead:
    return UserRead.model_validate(user)


@router.get(
    "/verify-email",
    response_model=MessageResponse,
    summary="Verify Email",
    description="Confirm an email address with the token issued at registration.",
    response_description="Confirmation message.",
    responses={
        200: {"description": "Email verified"},
        400: {"description": "Invalid verification token"},
    },
)
async def verify_email(token: str, session: SessionDep) -> MessageResponse:
    """Mark the account owning ``token`` as verified; the token is single-use."""
    repository = UserRepository(session)
    user = await repository.get_by_verification_token(token)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid verification token")
    user.is_email_verified = True
    user.email_verification_token = None
    await repository.update(user)
    log_auth_event("verify_email", user_id=user.id, username=user.username)
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/password-reset/request",
    response_model=PasswordResetRequested,
    summary="Request Password Reset",
    description="Issue a one-hour password reset token for the account with this email address.",
    response_description="Confirmation and, when exposure is enabled, the reset token.",
    responses={
        200: {"description": "Reset token issued"},
        404: {"description": "No account with this email"},
    },
)
async def request_password_reset(payload: PasswordResetRequest, session: SessionDep) -> PasswordResetRequested:
    repository = UserRepository(session)
    user = await repository.get_by_email(payload.email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    token = generate_token()
    user.password_reset_token = token
    user.password_reset_expires = utc_now() + timedelta(minutes=settings.auth.password_reset_expire_minutes)
    await repository.update(user)
    logger.info(f"Password reset requested for user {user.id}; reset token: {token}", extra={"user_id": user.id})
    log_auth_event("password_reset_request", user_id=user.id, username=user.username)
    return PasswordResetRequested(
        message="Password reset token issued",
        reset_token=token if _expose_token(user.email) else None,
    )


@router.post(
    "/password-reset/confirm",
    response_model=MessageResponse,
    summary="Confirm Password Reset",
    description="Set a new password using a reset token. Existing refresh tokens are revoked.",
    response_description="Confirmation message.",
    responses={
        200: {"description": "Password updated"},
        400: {"description": "Invalid or expired token"},
    },
)
async def confirm_password_reset(payload: PasswordResetConfirm, session: SessionDep) -> MessageResponse:
    repository = UserRepository(session)
    user = await repository.get_by_reset_token(payload.token)
    if user is None or user.password_reset_expires is None or user.password_reset_expires < utc_now():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired token")

    user.password_hash = hash_password(payload.new_password)
    user.password_reset_token = None
    user.password_reset_expires = None
    user.refresh_token = None
    user.refresh_token_expires_at = None
    await repository.update(user)
    log_auth_event("password_reset", user_id=user.id, username=user.username)
    return MessageResponse(message="Password has been reset")
