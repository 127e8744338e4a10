"""
User listing and profile schemas.
"""

from datetime import datetime
from typing import List, Optional

from core.schema_base import HTTPSchemaModel

from .auth import UserRead


class TechnicianRead(HTTPSchemaModel):
    """Technician entry in the admin assignment picker."""

    id: int
    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    created_at: Optional[datetime] = None


class TechniciansResponse(HTTPSchemaModel):
    technicians: List[TechnicianRead]


class ProfileResponse(HTTPSchemaModel):
    user: UserRead
