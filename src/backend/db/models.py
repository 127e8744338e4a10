"""
Database models for the maintenance desk.

Two tables:
- users: residents, technicians and administrators
- maintenance_requests: tickets filed by residents and worked by technicians
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column, ForeignKey, Index, Integer, String, Text, text
from sqlmodel import Field, Relationship, SQLModel

from .enums import RequestCategory, RequestPriority, RequestStatus, UserRole


def utc_now() -> datetime:
    """
    Get current time in UTC (timezone-naive) for database storage.

    All timestamps are stored as naive UTC; the API layer adds the 'Z' suffix
    when serializing.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TableModel(SQLModel):
    """Base table model with common functionality."""

    pass


class User(TableModel, table=True):
    """Account of a resident, technician or administrator."""

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)

    email: str = Field(
        max_length=255,
        sa_column=Column(String(255), unique=True, nullable=False),
        description="Login email, stored lower-cased",
    )
    password_hash: str = Field(
        max_length=255,
        sa_column=Column(String(255), nullable=False),
        description="bcrypt hash of the password",
    )
    first_name: str = Field(max_length=50, sa_column=Column(String(50), nullable=False))
    last_name: str = Field(max_length=50, sa_column=Column(String(50), nullable=False))
    role: UserRole = Field(
        default=UserRole.RESIDENT,
        sa_column=Column(String(20), nullable=False),
        description="resident, technician or admin",
    )
    phone_number: Optional[str] = Field(default=None, max_length=20)
    apartment_number: Optional[str] = Field(default=None, max_length=20)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column_kwargs={"server_default": text("CURRENT_TIMESTAMP")},
        description="Creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column_kwargs={
            "server_default": text("CURRENT_TIMESTAMP"),
            "onupdate": utc_now,
        },
        description="Last update timestamp",
    )

    # Relationships
    filed_requests: List["MaintenanceRequest"] = Relationship(
        back_populates="resident",
        sa_relationship_kwargs={"foreign_keys": "MaintenanceRequest.resident_id"},
    )
    assigned_requests: List["MaintenanceRequest"] = Relationship(
        back_populates="technician",
        sa_relationship_kwargs={"foreign_keys": "MaintenanceRequest.technician_id"},
    )

    __table_args__ = (
        Index("ix_users_role", "role"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def role_value(self) -> str:
        # Rows loaded from the database carry the raw string
        return self.role.value if isinstance(self.role, UserRole) else str(self.role)


class MaintenanceRequest(TableModel, table=True):
    """A maintenance ticket. Never deleted; cancelled is terminal."""

    __tablename__ = "maintenance_requests"

    id: Optional[int] = Field(default=None, primary_key=True)

    resident_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        description="Resident who filed the ticket",
    )
    technician_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
        ),
        description="Technician currently assigned, if any",
    )

    title: Optional[str] = Field(default=None, max_length=255)
    description: str = Field(sa_column=Column(Text, nullable=False))
    category: RequestCategory = Field(sa_column=Column(String(20), nullable=False))
    priority: RequestPriority = Field(
        default=RequestPriority.MEDIUM,
        sa_column=Column(String(20), nullable=False, server_default="medium"),
    )
    status: RequestStatus = Field(
        default=RequestStatus.NEW,
        sa_column=Column(String(20), nullable=False, server_default="new"),
    )
    media_urls: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list),
        description="Ordered references to uploaded files",
    )
    work_notes: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    completed_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column_kwargs={"server_default": text("CURRENT_TIMESTAMP")},
        description="Creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column_kwargs={
            "server_default": text("CURRENT_TIMESTAMP"),
            "onupdate": utc_now,
        },
        description="Last update timestamp",
    )

    # Relationships
    resident: Optional[User] = Relationship(
        back_populates="filed_requests",
        sa_relationship_kwargs={
            "lazy": "selectin",
            "foreign_keys": "MaintenanceRequest.resident_id",
        },
    )
    technician: Optional[User] = Relationship(
        back_populates="assigned_requests",
        sa_relationship_kwargs={
            "lazy": "selectin",
            "foreign_keys": "MaintenanceRequest.technician_id",
        },
    )

    __table_args__ = (
        Index("ix_maintenance_requests_resident_id", "resident_id"),
        Index("ix_maintenance_requests_technician_id", "technician_id"),
        Index("ix_maintenance_requests_status", "status"),
        Index("ix_maintenance_requests_category", "category"),
        Index("ix_maintenance_requests_created_at", "created_at"),
    )
