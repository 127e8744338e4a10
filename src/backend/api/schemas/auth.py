"""
Authentication schemas: registration, login and the shared token payload.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from core.schema_base import HTTPSchemaModel
from db.enums import UserRole

# Roles open to self-registration; admins are bootstrapped
REGISTERABLE_ROLES = (UserRole.RESIDENT, UserRole.TECHNICIAN)


class RegisterRequest(HTTPSchemaModel):
    """Schema for public account registration."""

    email: EmailStr
    # bcrypt ignores input beyond 72 bytes
    password: str = Field(..., min_length=6, max_length=72)
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    role: UserRole
    phone_number: Optional[str] = Field(None, pattern=r"^\d{10,15}$")
    apartment_number: Optional[str] = Field(None, max_length=20)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("must be at least 2 characters")
        return v

    @field_validator("role")
    @classmethod
    def role_must_be_registerable(cls, v: UserRole) -> UserRole:
        if v not in REGISTERABLE_ROLES:
            raise ValueError("role must be resident or technician")
        return v


class LoginRequest(HTTPSchemaModel):
    """Schema for login. Shape is checked here; credentials in the service."""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class UserRead(HTTPSchemaModel):
    """Public view of a user; never carries the password hash."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    phone_number: Optional[str] = None
    apartment_number: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthResponse(HTTPSchemaModel):
    token: str
    user: UserRead
