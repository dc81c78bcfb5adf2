"""Admin analytics: the filterable dashboard and the timeframe report."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import require_role
from app.api.providers import get_analytics_repo
from app.api.reporting import run_report
from app.models.principal import Principal
from app.models.reports import DashboardReport, TimeframeReport
from app.repos.analytics_repo import AnalyticsRepo, CourseFilter
from app.services.admin_analytics import (
    Timeframe,
    build_dashboard,
    build_timeframe_report,
    parse_id_list,
)

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])

AdminPrincipal = Annotated[Principal, Depends(require_role("admin"))]
Repo = Annotated[AnalyticsRepo, Depends(get_analytics_repo)]


@router.get("/dashboard", response_model=DashboardReport)
async def dashboard(
    _principal: AdminPrincipal,
    repo: Repo,
    start_date: date | None = None,
    end_date: date | None = None,
    category_ids: Annotated[
        str | None, Query(description="JSON array of category ids")
    ] = None,
    instructor_ids: Annotated[
        str | None, Query(description="JSON array of instructor ids")
    ] = None,
) -> DashboardReport:
    categories = parse_id_list(category_ids, "category_ids")
    instructors = parse_id_list(instructor_ids, "instructor_ids")
    return await run_report(
        "dashboard",
        lambda: build_dashboard(
            repo,
            start_date=start_date,
            end_date=end_date,
            category_ids=categories,
            instructor_ids=instructors,
            today=datetime.now(UTC).date(),
        ),
    )


@router.get("", response_model=TimeframeReport)
async def timeframe_analytics(
    _principal: AdminPrincipal,
    repo: Repo,
    timeframe: Timeframe = "month",
    course_id: str | None = None,
    instructor_id: str | None = None,
    category: str | None = None,
    include_enrollments: bool = True,
    include_courses: bool = True,
    include_top_courses: bool = True,
    include_comparison: bool = True,
) -> TimeframeReport:
    flt = CourseFilter(
        category_ids=(category,) if category else (),
        instructor_ids=(instructor_id,) if instructor_id else (),
        course_id=course_id or None,
    )
    return await run_report(
        "timeframe",
        lambda: build_timeframe_report(
            repo,
            timeframe=timeframe,
            flt=flt,
            now=datetime.now(UTC),
            include_enrollments=include_enrollments,
            include_courses=include_courses,
            include_top_courses=include_top_courses,
            include_comparison=include_comparison,
        ),
    )
