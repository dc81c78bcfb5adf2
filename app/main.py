from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.access_control import router as access_control_router
from app.api.analytics import router as analytics_router
from app.api.health import router as health_router
from app.api.instructor_analytics import router as instructor_analytics_router
from app.api.marks import router as marks_router
from app.api.metrics_endpoint import router as metrics_router
from app.api.privacy import router as privacy_router
from app.api.search import router as search_router
from app.core.config import SETTINGS
from app.core.errors import install_error_handlers
from app.core.logging import setup_logging
from app.db.engine import lifespan_db
from app.db.redis import lifespan_redis
from app.middleware.metrics import MetricsMiddleware
from app.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Teardown runs in reverse order of startup.
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="lms-reporting",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

install_error_handlers(app)

# Last-added runs first: RequestContext (outermost) → Metrics → route.
# Every request has its ID before metrics or handlers log anything.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(marks_router)
app.include_router(instructor_analytics_router)
app.include_router(search_router)
app.include_router(analytics_router)
app.include_router(access_control_router)
app.include_router(privacy_router)

logger.info(
    "lms-reporting started  env=%s log_level=%s port=%d tz=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.report_timezone,
    "on" if SETTINGS.is_dev else "off",
)
