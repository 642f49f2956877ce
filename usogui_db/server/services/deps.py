"""
API Dependencies.

Provides the database session, the authenticated user (required or optional),
role guards and the spoiler progress for API endpoints.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from usogui_db.core.database import get_session
from usogui_db.core.database.entities.users import User
from usogui_db.core.database.repositories.users import UserRepository
from usogui_db.core.logging_config import get_logger
from usogui_db.core.models.domain import UserRole
from usogui_db.server.services.security import InvalidTokenError, decode_access_token
from usogui_db.server.services.spoilers import resolve_progress

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]
CredentialsDep = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


async def _user_from_token(token: str, session: AsyncSession) -> Optional[User]:
    try:
        payload = decode_access_token(token)
    except InvalidTokenError as e:
        logger.debug(f"Rejected access token: {e}")
        return None
    return await UserRepository(session).get_by_id(int(payload["sub"]))


async def get_current_user(credentials: CredentialsDep, session: SessionDep) -> User:
    """Resolve the bearer token to a user or fail with 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = await _user_from_token(credentials.credentials, session)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(credentials: CredentialsDep, session: SessionDep) -> Optional[User]:
    """Resolve the bearer token when present; invalid tokens count as anonymous."""
    if credentials is None:
        return None
    return await _user_from_token(credentials.credentials, session)


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]


def require_roles(*roles: UserRole):
    """Build a dependency that admits only users holding one of ``roles``."""

    async def _guard(user: CurrentUser) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _guard


ModeratorUser = Annotated[User, Depends(require_roles(UserRole.moderator, UserRole.admin))]
AdminUser = Annotated[User, Depends(require_roles(UserRole.admin))]


async def get_spoiler_progress(
    user: OptionalUser,
    user_progress: Optional[int] = Query(
        default=None, ge=1, description="Hide content past this chapter (defaults to the reader's saved progress)"
    ),
) -> Optional[int]:
    return resolve_progress(user_progress, user)


ProgressDep = Annotated[Optional[int], Depends(get_spoiler_progress)]
