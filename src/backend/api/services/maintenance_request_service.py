"""
Maintenance request service: the ticket lifecycle.

Create, list per resident / per technician / for admins, status updates and
technician assignment. Mutations lock the ticket row (SELECT ... FOR UPDATE)
so concurrent updates apply one after the other.
"""

import logging
import math
from typing import List, Optional, Tuple

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas.maintenance_request import (
    AssignTechnicianRequest,
    MaintenanceRequestCreate,
    PaginationMeta,
    StatusUpdateRequest,
)
from core.decorators import log_database_operation, transactional_database_operation
from core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from core.logging_config import TicketLogger
from db import (
    PRIORITY_RANK,
    MaintenanceRequest,
    RequestCategory,
    RequestStatus,
    User,
    UserRole,
    utc_now,
)

logger = logging.getLogger(__name__)
ticket_logger = TicketLogger()

# urgent=1 ... low=4; unknown values sort last
priority_rank = case(
    {priority.value: rank for priority, rank in PRIORITY_RANK.items()},
    value=MaintenanceRequest.priority,
    else_=len(PRIORITY_RANK) + 1,
)


def _status_value(status) -> str:
    return status.value if isinstance(status, RequestStatus) else str(status)


class MaintenanceRequestService:
    """Service for maintenance ticket operations."""

    def __init__(self, session: AsyncSession):
        self.db = session

    def _select_tickets(self):
        return select(MaintenanceRequest).options(
            selectinload(MaintenanceRequest.resident),
            selectinload(MaintenanceRequest.technician),
        )

    async def get_request(self, request_id: int) -> Optional[MaintenanceRequest]:
        """Load one ticket with resident and technician, bypassing stale state."""
        result = await self.db.execute(
            self._select_tickets()
            .where(MaintenanceRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _lock_request(self, request_id: int) -> MaintenanceRequest:
        result = await self.db.execute(
            select(MaintenanceRequest)
            .where(MaintenanceRequest.id == request_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        ticket = result.scalar_one_or_none()
        if ticket is None:
            raise NotFoundError("Request not found")
        return ticket

    @transactional_database_operation("create maintenance request")
    async def create_request(
        self,
        resident: User,
        data: MaintenanceRequestCreate,
        media_urls: Optional[List[str]] = None,
    ) -> MaintenanceRequest:
        """
        File a new ticket for the resident.

        Args:
            resident: Authenticated resident filing the ticket
            data: Validated form fields
            media_urls: Stored attachment references, in upload order

        Returns:
            The created ticket (status new) with relationships loaded
        """
        ticket = MaintenanceRequest(
            resident_id=resident.id,
            title=data.title,
            description=data.description,
            category=data.category,
            priority=data.priority,
            status=RequestStatus.NEW,
            media_urls=list(media_urls or []),
        )
        self.db.add(ticket)
        await self.db.flush()

        ticket_logger.ticket_created(
            ticket.id, resident.id, data.category.value, data.priority.value
        )
        return await self.get_request(ticket.id)

    @log_database_operation("list resident requests")
    async def list_for_resident(
        self, resident_id: int, caller: User
    ) -> List[MaintenanceRequest]:
        """
        Tickets filed by one resident, newest first.

        Raises:
            AuthorizationError: If a resident asks for someone else's tickets
        """
        if caller.role_value != UserRole.ADMIN.value and caller.id != resident_id:
            raise AuthorizationError("Access denied")

        result = await self.db.execute(
            self._select_tickets()
            .where(MaintenanceRequest.resident_id == resident_id)
            .order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc())
        )
        return list(result.scalars().all())

    @log_database_operation("list technician requests")
    async def list_for_technician(
        self, technician_id: int, caller: User
    ) -> List[MaintenanceRequest]:
        """
        Work queue of one technician: most urgent first, then oldest first.

        Raises:
            AuthorizationError: If a technician asks for someone else's queue
        """
        if caller.role_value != UserRole.ADMIN.value and caller.id != technician_id:
            raise AuthorizationError("Access denied")

        result = await self.db.execute(
            self._select_tickets()
            .where(MaintenanceRequest.technician_id == technician_id)
            .order_by(
                priority_rank,
                MaintenanceRequest.created_at.asc(),
                MaintenanceRequest.id.asc(),
            )
        )
        return list(result.scalars().all())

    @transactional_database_operation("update request status")
    async def update_status(
        self, request_id: int, data: StatusUpdateRequest, caller: User
    ) -> MaintenanceRequest:
        """
        Move a ticket to a new status, optionally appending work notes.

        completed_at is stamped on every transition into completed and left
        alone otherwise.

        Raises:
            NotFoundError: Ticket does not exist
            AuthorizationError: Technician is not the assignee
            ConflictError: Ticket is already completed or cancelled
        """
        ticket = await self._lock_request(request_id)

        if (
            caller.role_value == UserRole.TECHNICIAN.value
            and ticket.technician_id != caller.id
        ):
            raise AuthorizationError("Access denied")

        old_status = _status_value(ticket.status)
        if RequestStatus(old_status).is_terminal:
            ticket_logger.transition_rejected(request_id, old_status, "terminal status")
            raise ConflictError(f"Cannot change status of a {old_status} request")

        ticket.status = data.status
        if data.work_notes:
            ticket.work_notes = (
                f"{ticket.work_notes}\n{data.work_notes}"
                if ticket.work_notes
                else data.work_notes
            )
        if data.status == RequestStatus.COMPLETED:
            ticket.completed_at = utc_now()
        ticket.updated_at = utc_now()

        await self.db.flush()
        ticket_logger.status_changed(request_id, old_status, data.status.value, caller.id)
        return await self.get_request(request_id)

    @log_database_operation("list all requests")
    async def list_all(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[RequestStatus] = None,
        category: Optional[RequestCategory] = None,
    ) -> Tuple[List[MaintenanceRequest], PaginationMeta]:
        """
        One page of all tickets, newest first, with optional filters.

        Returns:
            Tuple of (tickets on the page, pagination metadata)
        """
        filters = []
        if status is not None:
            filters.append(MaintenanceRequest.status == status.value)
        if category is not None:
            filters.append(MaintenanceRequest.category == category.value)

        total = (
            await self.db.execute(
                select(func.count()).select_from(MaintenanceRequest).where(*filters)
            )
        ).scalar_one()

        result = await self.db.execute(
            self._select_tickets()
            .where(*filters)
            .order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        pagination = PaginationMeta(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
        )
        return list(result.scalars().all()), pagination

    @transactional_database_operation("assign technician")
    async def assign_technician(
        self, request_id: int, data: AssignTechnicianRequest
    ) -> MaintenanceRequest:
        """
        Assign (or reassign) a technician; the ticket moves to assigned.

        Raises:
            NotFoundError: Ticket does not exist
            ValidationError: technicianId is not a technician account
            ConflictError: Ticket is already completed or cancelled
        """
        ticket = await self._lock_request(request_id)

        technician = await self.db.get(User, data.technician_id)
        if technician is None or technician.role_value != UserRole.TECHNICIAN.value:
            raise ValidationError(
                detail="Invalid technician",
                errors=[{"field": "technicianId", "message": "Invalid technician"}],
            )

        old_status = _status_value(ticket.status)
        if RequestStatus(old_status).is_terminal:
            ticket_logger.transition_rejected(request_id, old_status, "terminal status")
            raise ConflictError(f"Cannot assign a {old_status} request")

        previous_technician_id = ticket.technician_id
        ticket.technician_id = technician.id
        ticket.status = RequestStatus.ASSIGNED
        ticket.updated_at = utc_now()

        await self.db.flush()
        ticket_logger.ticket_assigned(request_id, technician.id, previous_technician_id)
        return await self.get_request(request_id)
