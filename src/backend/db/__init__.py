"""
Database models using SQLModel.

Importing this package registers every table on SQLModel.metadata.
"""
from .enums import (
    ACTIVE_STATUSES,
    OPEN_STATUSES,
    PRIORITY_RANK,
    TERMINAL_STATUSES,
    UPDATABLE_STATUSES,
    RequestCategory,
    RequestPriority,
    RequestStatus,
    UserRole,
)
from .models import MaintenanceRequest, TableModel, User, utc_now

__all__ = [
    # Enums
    "UserRole",
    "RequestCategory",
    "RequestPriority",
    "RequestStatus",
    "PRIORITY_RANK",
    "TERMINAL_STATUSES",
    "OPEN_STATUSES",
    "ACTIVE_STATUSES",
    "UPDATABLE_STATUSES",
    # Tables
    "TableModel",
    "User",
    "MaintenanceRequest",
    "utc_now",
]
