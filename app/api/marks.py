"""Per-course grade report for the course's instructor."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import require_user
from app.api.providers import get_gradebook_repo
from app.api.reporting import run_report
from app.core.errors import NotFoundError
from app.models.principal import Principal
from app.models.reports import GradeReport
from app.repos.gradebook_repo import GradebookRepo
from app.services.grading import build_grade_report

router = APIRouter(prefix="/v1/instructor/courses", tags=["instructor"])


@router.get("/{course_id}/marks", response_model=GradeReport)
async def course_marks(
    course_id: str,
    principal: Annotated[Principal, Depends(require_user)],
    repo: Annotated[GradebookRepo, Depends(get_gradebook_repo)],
) -> GradeReport:
    async def build() -> GradeReport:
        course = await repo.get_course(course_id)
        # Someone else's course is reported exactly like a missing one.
        if course is None or (
            course.instructor_id != principal.user_id
            and not principal.is_platform_admin()
        ):
            raise NotFoundError("Course not found")
        return await build_grade_report(repo, course, now=datetime.now(UTC))

    return await run_report("grades", build)
