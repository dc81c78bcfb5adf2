"""Shared wrappers for route handlers that read the data store."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from app.core.errors import LmsError, UpstreamError
from app.core.metrics import REPORT_DURATION, REPORT_FAILURES

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def guarded(what: str, call: Callable[[], Awaitable[T]]) -> T:
    """Await ``call``; anything but an LmsError becomes an UpstreamError.

    The original message travels as ``details``, which the error handler
    drops in production.
    """
    try:
        return await call()
    except LmsError:
        raise
    except Exception as exc:
        logger.exception("Failed to %s", what, extra={"report": what})
        raise UpstreamError(f"Failed to {what}", details=str(exc)) from exc


async def run_report(report: str, build: Callable[[], Awaitable[T]]) -> T:
    """``guarded`` plus duration and failure metrics under ``report``."""
    start = time.perf_counter()
    try:
        return await guarded(f"build {report} report", build)
    except UpstreamError:
        REPORT_FAILURES.labels(report=report).inc()
        raise
    finally:
        REPORT_DURATION.labels(report=report).observe(time.perf_counter() - start)
