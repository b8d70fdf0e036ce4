"""
Per-client request rate limiting on top of the `limits` library.

Usage:
    limiter = build_rate_limiter("resend", limit=3, window_seconds=60)

    @router.post("/resend", dependencies=[Depends(limiter)])
    async def resend(...): ...

Requests are counted in a moving window per (scope, client IP). The
counters live in one of two `limits` storages, picked by RATE_LIMIT_BACKEND:
- memory: process-local, lost on restart and not shared between workers.
- mongo: the `rate_limits` collection of the application database, shared
  by every instance. `limits` keeps a TTL index on it.
"""

import logging
import math
import time
from typing import Optional

from fastapi import Request
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, MongoDBStorage, Storage
from limits.strategies import MovingWindowRateLimiter

from wostup.core.config import get_settings
from wostup.core.errors import RateLimitException
from wostup.db.mongodb import COLLECTIONS

logger = logging.getLogger(__name__)


class RateLimiter:
    """FastAPI dependency rejecting clients over `limit` requests per window."""

    def __init__(self, scope: str, limit: int, window_seconds: int, storage: Optional[Storage] = None):
        self.scope = scope
        self.item = RateLimitItemPerSecond(limit, window_seconds)
        self.storage = storage or MemoryStorage()
        self.strategy = MovingWindowRateLimiter(self.storage)

    def check(self, client_key: str) -> None:
        if self.strategy.hit(self.item, self.scope, client_key):
            return
        reset_at = self.strategy.get_window_stats(self.item, self.scope, client_key).reset_time
        logger.warning("Rate limit hit for %s on %s", client_key, self.scope)
        raise RateLimitException(retry_after=max(math.ceil(reset_at - time.time()), 1))

    def reset(self) -> None:
        self.storage.reset()

    async def __call__(self, request: Request) -> None:
        self.check(client_ip(request))


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def build_storage(backend: str) -> Storage:
    settings = get_settings()
    backend = backend.lower()
    if backend == "mongo":
        return MongoDBStorage(
            settings.mongodb_uri,
            database_name=settings.mongodb_db,
            window_collection_name=COLLECTIONS["rate_limits"],
        )
    if backend == "memory":
        return MemoryStorage()
    raise ValueError(f"Unknown rate limit backend: {backend}")


def build_rate_limiter(scope: str, limit: int, window_seconds: int) -> RateLimiter:
    """Create a limiter backed by the storage named in RATE_LIMIT_BACKEND."""
    storage = build_storage(get_settings().rate_limit_backend)
    return RateLimiter(scope, limit, window_seconds, storage=storage)
