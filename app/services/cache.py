"""Read-through cache for derived reports.

Reports are pure functions of a data snapshot, so they are cached under a
key that encodes every input and left to expire by TTL.  Nothing in this
service writes primary data, so there is no invalidation on the hot path;
``delete`` and ``delete_pattern`` exist for operators and tests.

The cache is auxiliary.  ``read_through`` is FAIL-OPEN: any backend failure
or corrupt entry is logged and treated as a miss, so the caller gets a
freshly computed value instead of an error.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from app.core.metrics import CACHE_OPERATIONS
from app.db.redis import redis_pool

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@runtime_checkable
class CacheService(Protocol):
    async def get(self, key: str) -> str | None:
        """Fetch a cached value.  Returns None on cache miss."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value with a TTL (time to live)."""
        ...

    async def delete(self, key: str) -> None: ...

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching a glob pattern (e.g., 'search:*')."""
        ...


class InMemoryCacheService:
    """In-memory cache for dev and tests; no TTL enforcement.

    The autouse fixture in conftest.py clears the store between tests.
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._store[key] = value

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def delete_pattern(self, pattern: str) -> None:
        prefix = pattern.rstrip("*")
        for k in [k for k in self._store if k.startswith(prefix)]:
            del self._store[k]


class RedisCacheService:
    """Redis-backed cache, shared across all API instances."""

    _PREFIX = "cache:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        return await self._redis.get(f"{self._PREFIX}{key}")

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._redis.setex(f"{self._PREFIX}{key}", ttl_seconds, value)

    async def delete(self, key: str) -> None:
        await self._redis.delete(f"{self._PREFIX}{key}")

    async def delete_pattern(self, pattern: str) -> None:
        # SCAN, not KEYS: KEYS blocks the server for the whole keyspace walk.
        cursor = 0
        while True:
            cursor, keys = await self._redis.scan(
                cursor, match=f"{self._PREFIX}{pattern}", count=100
            )
            if keys:
                await self._redis.delete(*keys)
            if cursor == 0:
                break


async def read_through(
    cache: CacheService,
    key: str,
    ttl_seconds: int,
    model: type[M],
    compute: Callable[[], Awaitable[M]],
) -> M:
    """Return the cached ``model`` under ``key``, or compute and store it.

    Only ``compute`` may raise; every cache-side failure degrades to a miss.
    """
    cached: str | None = None
    try:
        cached = await cache.get(key)
    except Exception as exc:
        CACHE_OPERATIONS.labels(operation="error").inc()
        logger.warning(
            "Cache read failed, computing fresh: %s", exc, extra={"cache": key}
        )

    if cached is not None:
        try:
            value = model.model_validate_json(cached)
        except ValidationError:
            CACHE_OPERATIONS.labels(operation="error").inc()
            logger.warning("Discarding unreadable cache entry", extra={"cache": key})
        else:
            CACHE_OPERATIONS.labels(operation="hit").inc()
            logger.debug("Cache hit", extra={"cache": key})
            return value

    CACHE_OPERATIONS.labels(operation="miss").inc()
    value = await compute()

    try:
        await cache.set(key, value.model_dump_json(), ttl_seconds)
    except Exception as exc:
        CACHE_OPERATIONS.labels(operation="error").inc()
        logger.warning("Cache write failed: %s", exc, extra={"cache": key})

    return value


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

if redis_pool is not None:
    cache_service: CacheService = RedisCacheService(redis_pool)
else:
    cache_service = InMemoryCacheService()
