"""
User service: technician directory for assignment.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.decorators import log_database_operation
from db import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession):
        self.db = session

    @log_database_operation("list technicians")
    async def list_technicians(self) -> List[User]:
        """All technician accounts ordered by first then last name."""
        result = await self.db.execute(
            select(User)
            .where(User.role == UserRole.TECHNICIAN.value)
            .order_by(User.first_name, User.last_name, User.id)
        )
        return list(result.scalars().all())
