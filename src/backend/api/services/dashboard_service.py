"""
Dashboard statistics, computed per request and scoped by the caller's role.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.dashboard import (
    AdminDashboardStats,
    DashboardStats,
    ResidentDashboardStats,
    TechnicianDashboardStats,
)
from core.decorators import log_database_operation
from db import (
    ACTIVE_STATUSES,
    OPEN_STATUSES,
    MaintenanceRequest,
    RequestStatus,
    User,
    UserRole,
    utc_now,
)

logger = logging.getLogger(__name__)


def _values(statuses) -> list[str]:
    return [status.value for status in statuses]


def utc_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """[start, end) of the UTC calendar day containing `now` (naive UTC)."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


class DashboardService:
    """Service for role-scoped dashboard counters."""

    def __init__(self, session: AsyncSession):
        self.db = session

    async def _count_requests(self, *conditions) -> int:
        result = await self.db.execute(
            select(func.count(MaintenanceRequest.id)).where(*conditions)
        )
        return result.scalar_one()

    async def _count_users(self, role: UserRole) -> int:
        result = await self.db.execute(
            select(func.count(User.id)).where(User.role == role.value)
        )
        return result.scalar_one()

    @log_database_operation("dashboard stats")
    async def get_stats(self, user: User) -> DashboardStats:
        role = user.role_value
        if role == UserRole.ADMIN.value:
            return await self.admin_stats()
        if role == UserRole.TECHNICIAN.value:
            return await self.technician_stats(user.id)
        return await self.resident_stats(user.id)

    async def admin_stats(self) -> AdminDashboardStats:
        return AdminDashboardStats(
            total_requests=await self._count_requests(),
            new_requests=await self._count_requests(
                MaintenanceRequest.status == RequestStatus.NEW.value
            ),
            in_progress_requests=await self._count_requests(
                MaintenanceRequest.status.in_(_values(ACTIVE_STATUSES))
            ),
            completed_requests=await self._count_requests(
                MaintenanceRequest.status == RequestStatus.COMPLETED.value
            ),
            total_technicians=await self._count_users(UserRole.TECHNICIAN),
            total_residents=await self._count_users(UserRole.RESIDENT),
        )

    async def technician_stats(self, technician_id: int) -> TechnicianDashboardStats:
        own = MaintenanceRequest.technician_id == technician_id
        day_start, day_end = utc_day_bounds(utc_now())
        return TechnicianDashboardStats(
            assigned_requests=await self._count_requests(
                own, MaintenanceRequest.status == RequestStatus.ASSIGNED.value
            ),
            in_progress_requests=await self._count_requests(
                own, MaintenanceRequest.status == RequestStatus.IN_PROGRESS.value
            ),
            completed_today=await self._count_requests(
                own,
                MaintenanceRequest.status == RequestStatus.COMPLETED.value,
                MaintenanceRequest.completed_at >= day_start,
                MaintenanceRequest.completed_at < day_end,
            ),
        )

    async def resident_stats(self, resident_id: int) -> ResidentDashboardStats:
        own = MaintenanceRequest.resident_id == resident_id
        return ResidentDashboardStats(
            total_requests=await self._count_requests(own),
            pending_requests=await self._count_requests(
                own, MaintenanceRequest.status.in_(_values(OPEN_STATUSES))
            ),
            completed_requests=await self._count_requests(
                own, MaintenanceRequest.status == RequestStatus.COMPLETED.value
            ),
        )
