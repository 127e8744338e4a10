"""
Application factory for FastAPI.

create_app() builds the application: rate limiting, error handlers,
middleware, static attachment serving and routers.
"""

import logging
from pathlib import Path

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from api.v1 import api_router
from app.routes import health_router, root_router
from core.config import settings
from core.exceptions import ValidationError
from core.lifespan import lifespan
from core.middleware import (
    CorrelationIdMiddleware,
    DebugLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from core.rate_limit import enforce_rate_limit, setup_rate_limiting

logger = logging.getLogger(__name__)

# Location segments that only say where FastAPI found the value
_LOCATION_ROOTS = {"body", "query", "path", "header", "form"}


def _format_validation_errors(errors) -> list[dict]:
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_ROOTS]
        formatted.append(
            {
                "field": ".".join(loc),
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
            }
        )
    return formatted


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render schema validation failures as 400 with a field list."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Validation failed",
            "errors": _format_validation_errors(exc.errors()),
        },
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Render business-rule validation failures like schema failures."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "errors": exc.errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback and hide internals unless debug is on."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    content = {"detail": "Internal server error"}
    if settings.api.debug:
        content["error"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def create_app() -> FastAPI:
    """
    Application factory function.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.api.app_name,
        version=settings.api.app_version,
        description="Maintenance request tracking for residential properties",
        lifespan=lifespan,
        docs_url=f"{settings.api.api_prefix}/docs",
        redoc_url=f"{settings.api.api_prefix}/redoc",
        openapi_url=f"{settings.api.api_prefix}/openapi.json",
    )

    # One per-IP budget shared by every /api route
    setup_rate_limiting(app)

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    if settings.api.debug:
        app.add_middleware(DebugLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Correlation-ID"],
        expose_headers=["X-Correlation-ID", "Retry-After"],
    )

    app.add_middleware(SecurityHeadersMiddleware)

    # Outermost, so every log line of the request carries the ID
    app.add_middleware(CorrelationIdMiddleware)

    upload_dir = Path(settings.file_upload.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.file_upload.url_prefix,
        StaticFiles(directory=str(upload_dir)),
        name="uploads",
    )

    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(
        api_router,
        prefix=settings.api.api_prefix,
        dependencies=[Depends(enforce_rate_limit)],
    )

    return app
