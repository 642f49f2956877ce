"""
Password hashing and token primitives.

Passwords are hashed with bcrypt; access tokens are HS256 JWTs signed with
python-jose; refresh, verification and reset tokens are random hex strings.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from usogui_db.core.database.base import utc_now
from usogui_db.core.database.entities.users import User
from usogui_db.server.core.config import settings

# bcrypt only looks at the first 72 bytes of the password
_BCRYPT_MAX_BYTES = 72


class InvalidTokenError(Exception):
    """Raised when an access token cannot be decoded or is expired."""


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt.

    Args:
        password: Plain-text password
        rounds: bcrypt cost factor; defaults to the configured value

    Returns:
        The bcrypt hash as text
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.auth.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def generate_token(num_bytes: int = 48) -> str:
    """Random hex token used for refresh, verification and reset flows."""
    return secrets.token_hex(num_bytes)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Sign an access token for ``user``.

    The payload carries ``sub`` (user id), ``username``, ``role`` and ``exp``.
    """
    auth = settings.auth
    expire = utc_now() + (expires_delta or timedelta(minutes=auth.access_token_expire_minutes))
    role = user.role.value if hasattr(user.role, "value") else str(user.role)
    claims: Dict[str, Any] = {
        "sub": str(user.id),
        "username": user.username,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(claims, auth.jwt_secret, algorithm=auth.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        InvalidTokenError: If the signature, expiry or subject is invalid
    """
    auth = settings.auth
    try:
        payload = jwt.decode(token, auth.jwt_secret, algorithms=[auth.jwt_algorithm])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e
    if not str(payload.get("sub", "")).isdigit():
        raise InvalidTokenError("Token subject is not a user id")
    return payload
