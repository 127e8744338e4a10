"""
Middleware classes for the FastAPI application.
"""

from .correlation import CorrelationIdMiddleware, get_correlation_id
from .debug import DebugLoggingMiddleware
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "DebugLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "get_correlation_id",
]
