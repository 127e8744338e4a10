"""
Application route handlers outside the versioned API.
"""

from .health import router as health_router
from .root import router as root_router

__all__ = ["root_router", "health_router"]
