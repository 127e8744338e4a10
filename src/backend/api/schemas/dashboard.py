"""
Dashboard statistics schemas, one shape per role.
"""

from typing import Union

from core.schema_base import HTTPSchemaModel


class AdminDashboardStats(HTTPSchemaModel):
    total_requests: int
    new_requests: int
    in_progress_requests: int
    completed_requests: int
    total_technicians: int
    total_residents: int


class TechnicianDashboardStats(HTTPSchemaModel):
    assigned_requests: int
    in_progress_requests: int
    completed_today: int


class ResidentDashboardStats(HTTPSchemaModel):
    total_requests: int
    pending_requests: int
    completed_requests: int


DashboardStats = Union[
    AdminDashboardStats, TechnicianDashboardStats, ResidentDashboardStats
]


class DashboardStatsResponse(HTTPSchemaModel):
    stats: DashboardStats
