"""30-day engagement analytics for the calling instructor."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import require_user
from app.api.providers import get_cache, get_engagement_repo, get_user_repo
from app.api.reporting import guarded, run_report
from app.core.config import SETTINGS
from app.core.errors import AuthorizationError, NotFoundError
from app.models.principal import Principal
from app.models.reports import EngagementReport
from app.repos.engagement_repo import EngagementRepo
from app.repos.user_repo import UserRepo
from app.services.cache import CacheService, read_through
from app.services.engagement import build_engagement_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/instructor", tags=["instructor"])

ENGAGEMENT_CACHE_TTL_SECONDS = 3600
ANALYTICS_ROLES = ("instructor", "admin")


@router.get("/analytics", response_model=EngagementReport)
async def instructor_analytics(
    principal: Annotated[Principal, Depends(require_user)],
    users: Annotated[UserRepo, Depends(get_user_repo)],
    repo: Annotated[EngagementRepo, Depends(get_engagement_repo)],
    cache: Annotated[CacheService, Depends(get_cache)],
) -> EngagementReport:
    user = await guarded("load user", lambda: users.get_by_id(principal.user_id))
    if user is None:
        raise NotFoundError("User not found")

    # The stored role is authoritative, not the token's claim.
    role = user.role.lower()
    if role not in ANALYTICS_ROLES:
        logger.warning("Engagement analytics denied: user=%s role=%s", user.id, role)
        raise AuthorizationError("Instructor or admin role required")

    now = datetime.now(UTC)
    tz = SETTINGS.tz
    key = f"analytics:instructor:{role}:{user.id}:{now.astimezone(tz).date().isoformat()}"

    return await read_through(
        cache,
        key,
        ENGAGEMENT_CACHE_TTL_SECONDS,
        EngagementReport,
        lambda: run_report(
            "engagement",
            lambda: build_engagement_report(repo, user.id, now=now, tz=tz),
        ),
    )
