"""
Authentication service: registration and password login.
"""

import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import LoginRequest, RegisterRequest
from core.decorators import log_database_operation, transactional_database_operation
from core.exceptions import AuthenticationError, ConflictError
from core.logging_config import AuthLogger
from core.security import create_access_token, hash_password, verify_password
from db import User

logger = logging.getLogger(__name__)
auth_logger = AuthLogger()

INVALID_CREDENTIALS = "Invalid credentials"

# Compared against when the email is unknown so both failure paths cost one bcrypt check
_DUMMY_HASH = hash_password(uuid.uuid4().hex)


class AuthService:
    """Service for account registration and login."""

    def __init__(self, session: AsyncSession):
        self.db = session

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Look up a user by email, case-insensitively."""
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    @transactional_database_operation("register user")
    async def register(self, data: RegisterRequest) -> Tuple[User, str]:
        """
        Create a resident or technician account and issue its first token.

        Args:
            data: Validated registration payload (email already lower-cased)

        Returns:
            Tuple of (created user, access token)

        Raises:
            ConflictError: If the email is already registered
        """
        if await self.get_user_by_email(data.email):
            raise ConflictError("User already exists with this email")

        user = User(
            email=data.email,
            password_hash=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            phone_number=data.phone_number,
            apartment_number=data.apartment_number,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            raise ConflictError("User already exists with this email")

        await self.db.refresh(user)
        token = create_access_token(user)
        auth_logger.user_registered(user.id, user.email, user.role_value)
        return user, token

    @log_database_operation("login")
    async def login(
        self, data: LoginRequest, client_ip: Optional[str] = None
    ) -> Tuple[User, str]:
        """
        Verify credentials and issue a token.

        Raises:
            AuthenticationError: With the same message whether the email is
                unknown or the password is wrong
        """
        user = await self.get_user_by_email(data.email)

        if user is None:
            verify_password(data.password, _DUMMY_HASH)
            auth_logger.login_failed(data.email, client_ip)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not verify_password(data.password, user.password_hash):
            auth_logger.login_failed(data.email, client_ip)
            raise AuthenticationError(INVALID_CREDENTIALS)

        auth_logger.login_succeeded(user.id, user.email)
        return user, create_access_token(user)
