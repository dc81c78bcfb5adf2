"""Course access-control settings.  Anyone signed in may read; admins write."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import require_role, require_user
from app.api.providers import get_access_rule_repo
from app.api.reporting import guarded
from app.models.access_control import AccessControlIn, CourseAccessSettings
from app.models.principal import Principal
from app.repos.access_rule_repo import AccessRuleRepo
from app.services.access_control_service import (
    get_access_settings,
    replace_access_settings,
)

router = APIRouter(prefix="/v1/courses", tags=["access-control"])

Repo = Annotated[AccessRuleRepo, Depends(get_access_rule_repo)]


@router.get("/{course_id}/access-control", response_model=CourseAccessSettings)
async def read_access_control(
    course_id: str,
    _principal: Annotated[Principal, Depends(require_user)],
    repo: Repo,
) -> CourseAccessSettings:
    return await guarded(
        "fetch access control settings",
        lambda: get_access_settings(repo, course_id),
    )


@router.post("/{course_id}/access-control", response_model=CourseAccessSettings)
async def update_access_control(
    course_id: str,
    body: AccessControlIn,
    principal: Annotated[Principal, Depends(require_role("admin"))],
    repo: Repo,
) -> CourseAccessSettings:
    return await guarded(
        "update access control settings",
        lambda: replace_access_settings(
            repo, course_id, body, updated_by=principal.user_id
        ),
    )
