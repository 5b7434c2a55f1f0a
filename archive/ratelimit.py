"""Regnum Forum Archive — per-client request rate limiting."""

from __future__ import annotations

import logging

from limits import parse
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter

from config import RATE_LIMIT, app
from responses import error_response

logger = logging.getLogger(__name__)

EXEMPT_PATHS = {"/health"}


class RequestRateLimiter:
    """Fixed-window limiter keyed by client address."""

    def __init__(self, limit: str, storage_uri: str = "memory://"):
        self.item = parse(limit)
        self.storage = storage_from_string(storage_uri)
        self.strategy = FixedWindowRateLimiter(self.storage)

    def allow(self, key: str) -> bool:
        return self.strategy.hit(self.item, "archive-api", key)

    def reset(self) -> None:
        self.storage.reset()


app.state.rate_limiter = RequestRateLimiter(RATE_LIMIT)


@app.middleware("http")
async def rate_limit(request, call_next):
    if request.url.path not in EXEMPT_PATHS:
        client = request.client.host if request.client else "unknown"
        if not request.app.state.rate_limiter.allow(client):
            logger.warning("Rate limit exceeded for %s", client)
            return error_response(
                429, "Too many requests from this IP, please try again later."
            )
    return await call_next(request)
