"""
Per-IP request ceiling for the /api routes.

Every route under the API router draws from one shared budget per client
IP (settings.rate_limit.default_limit, e.g. "100/15 minutes"). The check
runs as a router-level dependency, so it happens before authentication and
body validation of the matched endpoint.
"""

import logging
import time

from fastapi import FastAPI, Request
from limits import RateLimitItem, parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import settings
from core.exceptions import RateLimitError

logger = logging.getLogger(__name__)

API_SCOPE = "api"


def setup_rate_limiting(app: FastAPI) -> Limiter:
    """Attach the limiter (storage + enabled flag) and the parsed budget to the app."""
    limiter = Limiter(
        key_func=get_remote_address,
        enabled=settings.rate_limit.enabled,
    )
    app.state.limiter = limiter
    app.state.api_rate_limit = parse(settings.rate_limit.default_limit)
    return limiter


async def enforce_rate_limit(request: Request) -> None:
    """
    Count the request against the caller's shared budget.

    Raises:
        RateLimitError: The budget for the current window is spent (429)
    """
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return

    item: RateLimitItem = request.app.state.api_rate_limit
    client_key = get_remote_address(request)
    if limiter.limiter.hit(item, API_SCOPE, client_key):
        return

    reset_at, _ = limiter.limiter.get_window_stats(item, API_SCOPE, client_key)
    retry_after = max(1, int(reset_at - time.time()))
    logger.warning(
        f"Rate limit exceeded for {client_key} on {request.method} {request.url.path}"
    )
    raise RateLimitError(retry_after)
