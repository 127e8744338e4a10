"""
User endpoints: technician directory, own profile and dashboard counters.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.auth import UserRead
from api.schemas.dashboard import DashboardStatsResponse
from api.schemas.user import ProfileResponse, TechnicianRead, TechniciansResponse
from api.services.dashboard_service import DashboardService
from api.services.user_service import UserService
from core.database import get_session
from core.dependencies import get_current_user, require_admin
from db import User

router = APIRouter()


@router.get("/technicians", response_model=TechniciansResponse)
async def list_technicians(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_admin),
):
    """
    List technicians for the assignment picker, ordered by name.

    **Permissions:** Admin only
    """
    technicians = await UserService(db).list_technicians()
    return TechniciansResponse(
        technicians=[TechnicianRead.model_validate(t) for t in technicians]
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """
    The authenticated user's own account.

    **Permissions:** Any authenticated user
    """
    return ProfileResponse(user=UserRead.model_validate(current_user))


@router.get("/dashboard-stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Counters for the caller's dashboard; the shape depends on the role.

    **Permissions:** Any authenticated user
    """
    stats = await DashboardService(db).get_stats(current_user)
    return DashboardStatsResponse(stats=stats)
