"""Prometheus scrape endpoint.

Exposes the HTTP metrics alongside the report metrics
(``report_build_duration_seconds``, ``report_failures_total``,
``cache_operations_total``) in text exposition format.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
