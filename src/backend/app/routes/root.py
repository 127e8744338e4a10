"""
Root endpoint handler.
"""

from fastapi import APIRouter

from core.config import settings

router = APIRouter()


@router.get("/")
async def root():
    """Service banner with documentation links."""
    return {
        "name": settings.api.app_name,
        "version": settings.api.app_version,
        "status": "operational",
        "docs": f"{settings.api.api_prefix}/docs",
        "openapi": f"{settings.api.api_prefix}/openapi.json",
    }
