"""
Maintenance request endpoints.

Residents file tickets (multipart, with up to five attachments), technicians
work their queue, admins list everything and assign technicians.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.maintenance_request import (
    AssignTechnicianRequest,
    MaintenanceRequestActionResponse,
    MaintenanceRequestCreate,
    MaintenanceRequestListResponse,
    MaintenanceRequestRead,
    PaginatedMaintenanceRequests,
    StatusUpdateRequest,
)
from api.services.file_service import FileService
from api.services.maintenance_request_service import MaintenanceRequestService
from core.config import settings
from core.database import get_session
from core.dependencies import (
    require_admin,
    require_resident,
    require_roles,
    require_technician_or_admin,
)
from db import RequestCategory, RequestStatus, User, UserRole

logger = logging.getLogger(__name__)

router = APIRouter()

require_resident_or_admin = require_roles(UserRole.RESIDENT, UserRole.ADMIN)


def get_file_service() -> FileService:
    return FileService()


@router.post(
    "",
    response_model=MaintenanceRequestActionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_request(
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    priority: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    db: AsyncSession = Depends(get_session),
    file_service: FileService = Depends(get_file_service),
    current_user: User = Depends(require_resident),
):
    """
    File a maintenance request.

    Args:
        description: What is wrong (10-2000 characters)
        category: plumbing, electrical, hvac, appliance, general or emergency
        title: Optional short summary (5-255 characters)
        priority: low, medium, high or urgent (default medium)
        files: Up to 5 attachments (images, video or pdf)

    Returns:
        MaintenanceRequestActionResponse: The new ticket with status new

    Raises:
        HTTPException 400: Validation failed

    **Permissions:** Resident only
    """
    try:
        data = MaintenanceRequestCreate(
            title=title,
            description=description,
            category=category,
            priority=priority,
        )
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors())

    uploads = [f for f in (files or []) if f.filename]
    media_urls = await file_service.save_files(uploads)

    try:
        ticket = await MaintenanceRequestService(db).create_request(
            current_user, data, media_urls
        )
    except Exception:
        await file_service.delete_files(media_urls)
        raise

    return MaintenanceRequestActionResponse(
        message="Request created successfully",
        request=MaintenanceRequestRead.from_ticket(ticket),
    )


@router.get("/resident/{resident_id}", response_model=MaintenanceRequestListResponse)
async def list_resident_requests(
    resident_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_resident_or_admin),
):
    """
    Tickets filed by a resident, newest first.

    **Permissions:** The resident themself, or admin
    """
    tickets = await MaintenanceRequestService(db).list_for_resident(
        resident_id, current_user
    )
    return MaintenanceRequestListResponse(
        requests=[MaintenanceRequestRead.from_ticket(t) for t in tickets]
    )


@router.get("/technician/{technician_id}", response_model=MaintenanceRequestListResponse)
async def list_technician_requests(
    technician_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_technician_or_admin),
):
    """
    A technician's work queue, urgent first, oldest first within a priority.

    **Permissions:** The technician themself, or admin
    """
    tickets = await MaintenanceRequestService(db).list_for_technician(
        technician_id, current_user
    )
    return MaintenanceRequestListResponse(
        requests=[MaintenanceRequestRead.from_ticket(t) for t in tickets]
    )


@router.put("/{request_id}/status", response_model=MaintenanceRequestActionResponse)
async def update_request_status(
    request_id: int,
    payload: StatusUpdateRequest,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_technician_or_admin),
):
    """
    Change a ticket's status and optionally append work notes.

    Raises:
        HTTPException 403: Technician is not assigned to the ticket
        HTTPException 404: Request not found
        HTTPException 409: Ticket already completed or cancelled

    **Permissions:** Assigned technician, or admin
    """
    ticket = await MaintenanceRequestService(db).update_status(
        request_id, payload, current_user
    )
    return MaintenanceRequestActionResponse(
        message="Request status updated successfully",
        request=MaintenanceRequestRead.from_ticket(ticket),
    )


@router.get("", response_model=PaginatedMaintenanceRequests)
async def list_all_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(
        settings.pagination.default_page_size,
        ge=1,
        le=settings.pagination.max_page_size,
    ),
    status: Optional[RequestStatus] = Query(None),
    category: Optional[RequestCategory] = Query(None),
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_admin),
):
    """
    All tickets, newest first, paginated and optionally filtered.

    **Permissions:** Admin only
    """
    tickets, pagination = await MaintenanceRequestService(db).list_all(
        page=page, limit=limit, status=status, category=category
    )
    return PaginatedMaintenanceRequests(
        requests=[MaintenanceRequestRead.from_ticket(t) for t in tickets],
        pagination=pagination,
    )


@router.put("/{request_id}/assign", response_model=MaintenanceRequestActionResponse)
async def assign_technician(
    request_id: int,
    payload: AssignTechnicianRequest,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_admin),
):
    """
    Assign a technician to a ticket; its status becomes assigned.

    Raises:
        HTTPException 400: technicianId is not a technician
        HTTPException 404: Request not found
        HTTPException 409: Ticket already completed or cancelled

    **Permissions:** Admin only
    """
    ticket = await MaintenanceRequestService(db).assign_technician(request_id, payload)
    return MaintenanceRequestActionResponse(
        message="Technician assigned successfully",
        request=MaintenanceRequestRead.from_ticket(ticket),
    )
