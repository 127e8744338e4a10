"""
Enums for database models.

These replace lookup tables for value sets that are fixed in code:
- UserRole: who a user is and what they may do
- RequestCategory / RequestPriority / RequestStatus: ticket classification

Values are persisted as plain strings (not native database enums) so the
schema stays portable between PostgreSQL and SQLite.
"""
from enum import Enum


class UserRole(str, Enum):
    """Role tag stored on every user. Immutable after registration."""
    RESIDENT = "resident"
    TECHNICIAN = "technician"
    ADMIN = "admin"


class RequestCategory(str, Enum):
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    HVAC = "hvac"
    APPLIANCE = "appliance"
    GENERAL = "general"
    EMERGENCY = "emergency"


class RequestPriority(str, Enum):
    """
    Ticket priority.

    Technician work queues are ordered by `rank` (urgent first).
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


PRIORITY_RANK = {
    RequestPriority.URGENT: 1,
    RequestPriority.HIGH: 2,
    RequestPriority.MEDIUM: 3,
    RequestPriority.LOW: 4,
}


class RequestStatus(str, Enum):
    """
    Ticket lifecycle status.

    NEW -> ASSIGNED -> IN_PROGRESS -> COMPLETED, with CANCELLED reachable
    from any non-terminal status.
    """
    NEW = "new"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED})

# Statuses counted as "open" on dashboards
OPEN_STATUSES = (RequestStatus.NEW, RequestStatus.ASSIGNED, RequestStatus.IN_PROGRESS)
ACTIVE_STATUSES = (RequestStatus.ASSIGNED, RequestStatus.IN_PROGRESS)

# Statuses a technician or admin may set through a status update;
# NEW is only ever the initial state.
UPDATABLE_STATUSES = (
    RequestStatus.ASSIGNED,
    RequestStatus.IN_PROGRESS,
    RequestStatus.COMPLETED,
    RequestStatus.CANCELLED,
)
