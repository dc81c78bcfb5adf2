"""Liveness and readiness probes.

``/health`` always answers 200 and reports each backing store as ``ok``,
``degraded`` or ``not_configured``; ``status`` is ``degraded`` when any
configured store fails its check.  ``/ready`` answers 200 whenever the
process can serve: Redis is optional (reports recompute without it), and
the database is checked per request by the report routes themselves.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response
from sqlalchemy import text

from app.db.engine import async_session_factory
from app.db.redis import redis_pool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _check_redis() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception as exc:
        logger.warning("Redis health check failed: %s", exc)
        return "degraded"
    return "ok"


async def _check_database() -> str:
    if async_session_factory is None:
        return "not_configured"
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Database health check failed: %s", exc)
        return "degraded"
    return "ok"


@router.get("/health")
async def health() -> dict:
    checks = {
        "redis": await _check_redis(),
        "database": await _check_database(),
    }
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
