"""
Debug logging middleware for request troubleshooting.

Only active when API_DEBUG is on. Credentials are redacted.
"""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.config import settings

logger = logging.getLogger("debug")


class DebugLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, sanitized headers, status and timing per request."""

    SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}

    async def dispatch(self, request: Request, call_next):
        if not settings.api.debug:
            return await call_next(request)

        safe_headers = {
            key: "[REDACTED]" if key.lower() in self.SENSITIVE_HEADERS else value
            for key, value in request.headers.items()
        }
        logger.debug(f"Request: {request.method} {request.url.path}")
        logger.debug(f"   Headers: {safe_headers}")

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"   Error: {e}", exc_info=True)
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"   Response: {response.status_code} in {elapsed_ms:.1f}ms")
        return response
