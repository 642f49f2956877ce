"""
User Endpoints.

Self-service profile and reading progress, public profiles, and admin
account management.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.repositories.users import UserRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import UserRole
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.users import (
    ProfileUpdate,
    ProgressRead,
    ProgressUpdate,
    UserAdminUpdate,
    UserPublic,
    UserRead,
)
from usogui_db.server.core.config import settings
from usogui_db.server.services.deps import AdminUser, CurrentUser, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate

logger = get_logger(__name__)

router = APIRouter()


# =====================================================================
# Self-service
# =====================================================================


@router.get(
    "/me/progress",
    response_model=ProgressRead,
    summary="Get Reading Progress",
    description="Return the highest chapter the current user has finished.",
    responses={401: {"description": "Not authenticated"}},
)
async def get_my_progress(user: CurrentUser) -> ProgressRead:
    return ProgressRead(user_progress=user.user_progress, username=user.username)


@router.put(
    "/me/progress",
    response_model=ProgressRead,
    summary="Update Reading Progress",
    description="Set the highest chapter the current user has finished. Drives spoiler gating on every listing.",
    responses={
        200: {"description": "Progress updated"},
        400: {"description": "Progress outside the published chapter range"},
        401: {"description": "Not authenticated"},
    },
)
async def update_my_progress(payload: ProgressUpdate, user: CurrentUser, session: SessionDep) -> ProgressRead:
    """
    Update reading progress.

    - **user_progress**: Chapter number between 1 and the latest published chapter.
    """
    if not 1 <= payload.user_progress <= settings.max_chapter:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Progress must be between 1 and {settings.max_chapter}",
        )
    user.user_progress = payload.user_progress
    user = await UserRepository(session).update(user)
    return ProgressRead(user_progress=user.user_progress, username=user.username)


@router.patch(
    "/me",
    response_model=UserRead,
    summary="Update Own Profile",
    description="Change the current user's username or email address.",
    responses={
        200: {"description": "Profile updated"},
        409: {"description": "Username or email already in use"},
    },
)
async def update_me(payload: ProfileUpdate, user: CurrentUser, session: SessionDep) -> UserRead:
    repository = UserRepository(session)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "username" in changes and changes["username"].lower() != user.username.lower():
        if await repository.get_by_username(changes["username"]):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    if "email" in changes and changes["email"].lower() != user.email.lower():
        if await repository.get_by_email(changes["email"]):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = await repository.apply_changes(user, changes)
    return UserRead.model_validate(user)


@router.get(
    "/public/{user_id}",
    response_model=UserPublic,
    summary="Public Profile",
    description="Return the public profile of a user.",
    responses={404: {"description": "User not found"}},
)
async def get_public_profile(user_id: int, session: SessionDep) -> UserPublic:
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserPublic.model_validate(user)


# =====================================================================
# Administration
# =====================================================================


@router.get(
    "",
    response_model=Page[UserRead],
    summary="List Users",
    description="List accounts, optionally filtered by role and a username/email search. Admin only.",
    responses={403: {"description": "Insufficient permissions"}},
)
async def list_users(
    response: Response,
    params: PageDep,
    session: SessionDep,
    admin: AdminUser,
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
) -> Page[UserRead]:
    users, total = await UserRepository(session).search(
        query=search, role=role, limit=params.limit, offset=params.offset
    )
    return paginate(response, users, total, params, UserRead.model_validate)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Get User",
    description="Retrieve a full account by ID. Admin only.",
    responses={404: {"description": "User not found"}},
)
async def get_user(user_id: int, session: SessionDep, admin: AdminUser) -> UserRead:
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserRead.model_validate(user)


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    summary="Update User",
    description="Change an account's role, verification flag or progress. Admin only.",
    responses={404: {"description": "User not found"}},
)
async def update_user(user_id: int, payload: UserAdminUpdate, session: SessionDep, admin: AdminUser) -> UserRead:
    repository = UserRepository(session)
    user = await repository.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "user_progress" in changes and changes["user_progress"] > settings.max_chapter:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Progress must be between 1 and {settings.max_chapter}",
        )
    user = await repository.apply_changes(user, changes)
    if "role" in changes:
        logger.info(f"Admin {admin.id} set role of user {user.id} to {user.role.value}")
    return UserRead.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete User",
    description="Delete an account. Admin only; admins cannot delete themselves.",
    responses={
        400: {"description": "Admins cannot delete their own account"},
        404: {"description": "User not found"},
    },
)
async def delete_user(user_id: int, session: SessionDep, admin: AdminUser) -> MessageResponse:
    if user_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")
    if not await UserRepository(session).delete(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    logger.info(f"Admin {admin.id} deleted user {user_id}")
    return MessageResponse(message="User deleted")
