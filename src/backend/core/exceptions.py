"""
HTTP error types raised by services and dependencies.

Each one is an HTTPException subclass so FastAPI renders it as
{"detail": ...} with the right status code. Request-body validation errors
are rendered separately by the handler registered in app.factory.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Missing, malformed, expired or unverifiable credentials."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    """Authenticated, but the role does not permit the operation."""

    def __init__(self, detail: str = "Insufficient permissions"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """The request clashes with current state (duplicate email, terminal ticket)."""

    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ValidationError(HTTPException):
    """Business-rule validation failure detected outside pydantic."""

    def __init__(
        self,
        detail: str = "Validation failed",
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
        self.errors = errors or []


class RateLimitError(HTTPException):
    """The caller's IP has spent its request budget for the current window."""

    def __init__(
        self,
        retry_after: int,
        detail: str = "Too many requests from this IP, please try again later.",
    ):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            headers={"Retry-After": str(retry_after)},
        )
