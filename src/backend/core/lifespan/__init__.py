"""
Application lifespan management (startup and shutdown).
"""

from .manager import lifespan

__all__ = ["lifespan"]
