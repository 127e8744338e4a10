"""
API v1 routes, mounted under settings.api.api_prefix.
"""

from fastapi import APIRouter

from .endpoints import auth, requests, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(requests.router, prefix="/requests", tags=["Requests"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])

__all__ = ["api_router"]
