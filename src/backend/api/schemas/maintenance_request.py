"""
Maintenance request (ticket) schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from core.schema_base import HTTPSchemaModel
from db.enums import (
    UPDATABLE_STATUSES,
    RequestCategory,
    RequestPriority,
    RequestStatus,
)
from db.models import MaintenanceRequest


class MaintenanceRequestCreate(HTTPSchemaModel):
    """Form fields of a new ticket. Attachments travel separately."""

    title: Optional[str] = Field(None, min_length=5, max_length=255)
    description: str = Field(..., min_length=10, max_length=2000)
    category: RequestCategory
    priority: RequestPriority = RequestPriority.MEDIUM

    @field_validator("title", mode="before")
    @classmethod
    def blank_title_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("priority", mode="before")
    @classmethod
    def blank_priority_is_default(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return RequestPriority.MEDIUM
        return v


class StatusUpdateRequest(HTTPSchemaModel):
    status: RequestStatus
    work_notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("status")
    @classmethod
    def status_must_be_updatable(cls, v: RequestStatus) -> RequestStatus:
        if v not in UPDATABLE_STATUSES:
            allowed = ", ".join(s.value for s in UPDATABLE_STATUSES)
            raise ValueError(f"status must be one of: {allowed}")
        return v


class AssignTechnicianRequest(HTTPSchemaModel):
    technician_id: int = Field(..., gt=0)


class MaintenanceRequestRead(HTTPSchemaModel):
    """A ticket joined with resident and technician display fields."""

    id: int
    resident_id: int
    technician_id: Optional[int] = None
    title: Optional[str] = None
    description: str
    category: RequestCategory
    priority: RequestPriority
    status: RequestStatus
    media_urls: List[str] = []
    work_notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    resident_name: Optional[str] = None
    apartment_number: Optional[str] = None
    resident_phone: Optional[str] = None
    resident_email: Optional[str] = None
    technician_name: Optional[str] = None
    technician_phone: Optional[str] = None

    @classmethod
    def from_ticket(cls, ticket: MaintenanceRequest) -> "MaintenanceRequestRead":
        """Build the joined view; relationships must already be loaded."""
        data = {
            "id": ticket.id,
            "resident_id": ticket.resident_id,
            "technician_id": ticket.technician_id,
            "title": ticket.title,
            "description": ticket.description,
            "category": ticket.category,
            "priority": ticket.priority,
            "status": ticket.status,
            "media_urls": list(ticket.media_urls or []),
            "work_notes": ticket.work_notes,
            "completed_at": ticket.completed_at,
            "created_at": ticket.created_at,
            "updated_at": ticket.updated_at,
        }
        resident = ticket.resident
        if resident is not None:
            data.update(
                resident_name=resident.full_name,
                apartment_number=resident.apartment_number,
                resident_phone=resident.phone_number,
                resident_email=resident.email,
            )
        technician = ticket.technician
        if technician is not None:
            data.update(
                technician_name=technician.full_name,
                technician_phone=technician.phone_number,
            )
        return cls.model_validate(data)


class PaginationMeta(HTTPSchemaModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MaintenanceRequestListResponse(HTTPSchemaModel):
    requests: List[MaintenanceRequestRead]


class PaginatedMaintenanceRequests(HTTPSchemaModel):
    requests: List[MaintenanceRequestRead]
    pagination: PaginationMeta


class MaintenanceRequestActionResponse(HTTPSchemaModel):
    """Envelope for create, status update and assignment results."""

    message: str
    request: MaintenanceRequestRead
