"""
Health check endpoint handler.
"""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.database import check_database
from db import utc_now
from core.schema_base import serialize_datetime

router = APIRouter()

_started_at = time.monotonic()


@router.get("/health")
async def health_check():
    """
    Liveness and database reachability. No authentication.

    Returns 503 with status "degraded" when the database does not answer.
    """
    database_ok = await check_database()
    body = {
        "status": "OK" if database_ok else "degraded",
        "timestamp": serialize_datetime(utc_now()),
        "uptime": round(time.monotonic() - _started_at, 3),
        "services": {"database": "healthy" if database_ok else "unhealthy"},
    }
    return JSONResponse(status_code=200 if database_ok else 503, content=body)
