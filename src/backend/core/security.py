"""
Security utilities for password hashing and JWT tokens.

Passwords are hashed with bcrypt directly; tokens are HS256 JWTs carrying
the user's id, role and display identity.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

import bcrypt
import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from core.config import settings
from db import User

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


class SecurityError(Exception):
    """Base exception for security-related errors."""

    pass


class TokenExpiredError(SecurityError):
    """Raised when a token has expired."""

    pass


class TokenInvalidError(SecurityError):
    """Raised when a token is invalid."""

    pass


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=settings.security.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(
            _password_bytes(password), password_hash.encode("utf-8")
        )
    except ValueError:
        return False


def create_access_token(
    user: User, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed JWT access token for the given user.

    Args:
        user: Authenticated user; id, role, email and names go into the claims
        expires_delta: Custom lifetime (default from settings, 24 hours)

    Returns:
        Encoded JWT string

    Raises:
        SecurityError: If token creation fails
    """
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta
        or timedelta(hours=settings.security.access_token_expire_hours)
    )

    payload = {
        "sub": str(user.id),
        "role": user.role_value,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
        "jti": str(uuid4()),
        "iss": settings.security.jwt_issuer,
        "aud": settings.security.jwt_audience,
    }

    try:
        return jwt.encode(
            payload,
            settings.security.secret_key,
            algorithm=settings.security.algorithm,
        )
    except Exception as e:
        raise SecurityError(f"Failed to create access token: {str(e)}")


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        TokenExpiredError: If token has expired
        TokenInvalidError: If token is malformed, tampered or for another audience
    """
    try:
        return jwt.decode(
            token,
            settings.security.secret_key,
            algorithms=[settings.security.algorithm],
            audience=settings.security.jwt_audience,
            issuer=settings.security.jwt_issuer,
        )
    except ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {str(e)}")


def get_user_id_from_token(payload: Dict[str, Any]) -> int:
    """Extract the numeric user ID from a decoded payload.

    Raises:
        TokenInvalidError: If the subject is missing or not an integer
    """
    sub = payload.get("sub")
    if not sub:
        raise TokenInvalidError("User ID missing from token")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise TokenInvalidError("Invalid user ID in token")
