"""Read and replace a course's access-control settings."""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime

from app.core.errors import NotFoundError, ValidationError
from app.models.access_control import (
    AccessControlIn,
    CourseAccessSettings,
    prerequisite_target,
)
from app.repos.access_rule_repo import AccessRuleRepo

logger = logging.getLogger(__name__)

COURSE_ID_PATTERN = re.compile(r"^[a-z0-9-]+$", re.IGNORECASE)


def check_course_id(course_id: str) -> None:
    if not COURSE_ID_PATTERN.match(course_id):
        raise ValidationError(
            "Invalid course ID format", details={"course_id": course_id}
        )


def _check_rules(body: AccessControlIn) -> None:
    for index, rule in enumerate(body.rules):
        for prereq in rule.prerequisites:
            if prereq.type == rule.resource_type and (
                prerequisite_target(prereq) == rule.resource_id
            ):
                raise ValidationError(
                    "A resource cannot be its own prerequisite",
                    details={"rule": index, "resource_id": rule.resource_id},
                )


async def _require_course(repo: AccessRuleRepo, course_id: str) -> None:
    check_course_id(course_id)
    if not await repo.course_exists(course_id):
        raise NotFoundError("Course not found")


async def get_access_settings(
    repo: AccessRuleRepo, course_id: str
) -> CourseAccessSettings:
    await _require_course(repo, course_id)
    stored = await repo.get(course_id)
    if stored is None:
        return CourseAccessSettings(course_id=course_id)
    return stored


async def replace_access_settings(
    repo: AccessRuleRepo, course_id: str, body: AccessControlIn, *, updated_by: str
) -> CourseAccessSettings:
    await _require_course(repo, course_id)
    _check_rules(body)
    settings = CourseAccessSettings(
        course_id=course_id,
        is_public=body.is_public,
        requires_enrollment=body.requires_enrollment,
        allowed_roles=list(body.allowed_roles),
        rules=list(body.rules),
        updated_at=datetime.now(UTC),
    )
    await repo.save(settings)
    logger.info(
        "Access control updated course=%s by=%s rules=%d",
        course_id,
        updated_by,
        len(settings.rules),
    )
    return settings
