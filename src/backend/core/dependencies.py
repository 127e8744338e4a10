"""
Authentication and authorization dependencies for FastAPI.

get_current_user resolves the bearer token to a stored user; the role
dependencies gate routes on the user's role tag.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from core.exceptions import AuthenticationError, AuthorizationError
from core.security import (
    SecurityError,
    TokenExpiredError,
    decode_token,
    get_user_id_from_token,
)
from db import User, UserRole

logger = logging.getLogger(__name__)

# auto_error=False so a missing header becomes our 401, not FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Get the current authenticated user from the JWT bearer token.

    Args:
        credentials: HTTP Bearer credentials containing the JWT token
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        AuthenticationError: If the token is missing, expired, invalid,
            or names a user that no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")

    try:
        payload = decode_token(credentials.credentials)
        user_id = get_user_id_from_token(payload)
    except TokenExpiredError:
        raise AuthenticationError("Token has expired")
    except SecurityError as e:
        logger.debug(f"Rejected token: {e}")
        raise AuthenticationError("Invalid token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")

    return user


def require_roles(*roles: UserRole):
    """Create a dependency that requires any of the specified roles.

    Args:
        *roles: Accepted roles

    Returns:
        Dependency function for role authorization
    """
    allowed = {role.value for role in roles}

    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role_value not in allowed:
            raise AuthorizationError(
                f"Required role: one of {', '.join(sorted(allowed))}"
            )
        return user

    return role_checker


require_resident = require_roles(UserRole.RESIDENT)
require_admin = require_roles(UserRole.ADMIN)
require_technician_or_admin = require_roles(UserRole.TECHNICIAN, UserRole.ADMIN)
