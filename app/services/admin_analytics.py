"""Platform-wide analytics for administrators."""

from __future__ import annotations

import asyncio
import json
from datetime import UTC, date, datetime, time, timedelta
from typing import Literal

from app.core.errors import ValidationError
from app.models.reports import (
    Change,
    Comparison,
    CourseSection,
    DashboardFilters,
    DashboardReport,
    EnrollmentSection,
    TimeframeReport,
)
from app.repos.analytics_repo import AnalyticsRepo, CourseFilter, Window
from app.services.grading import round_2, round_half_up

Timeframe = Literal["day", "week", "month", "year", "all"]

TIMEFRAME_DAYS: dict[str, int] = {"day": 1, "week": 7, "month": 30, "year": 365}
ALL_TIME_START = datetime(2000, 1, 1, tzinfo=UTC)
DEFAULT_DASHBOARD_DAYS = 30
TOP_COURSES_LIMIT = 5


def parse_id_list(raw: str | None, field: str) -> tuple[str, ...]:
    """Decode a JSON array of strings passed as a single query parameter."""
    if raw is None or raw == "":
        return ()
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(
            f"{field} must be a JSON array", details={"field": field, "reason": str(exc)}
        ) from None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(
            f"{field} must be a JSON array of strings",
            details={"field": field, "value": raw},
        )
    return tuple(value)


def _day_window(start: date, end: date) -> Window:
    return Window(
        start=datetime.combine(start, time.min, tzinfo=UTC),
        end=datetime.combine(end, time.max, tzinfo=UTC),
    )


def _rate(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    return round_half_up(part / whole * 100)


async def build_dashboard(
    repo: AnalyticsRepo,
    *,
    start_date: date | None,
    end_date: date | None,
    category_ids: tuple[str, ...] = (),
    instructor_ids: tuple[str, ...] = (),
    today: date,
) -> DashboardReport:
    end = end_date or today
    start = start_date or end - timedelta(days=DEFAULT_DASHBOARD_DAYS)
    if start > end:
        raise ValidationError(
            "start_date must not be after end_date",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )

    flt = CourseFilter(category_ids=category_ids, instructor_ids=instructor_ids)
    window = _day_window(start, end)
    total, published, enrollments, new, completed = await asyncio.gather(
        repo.count_courses(flt),
        repo.count_courses(flt, published_only=True),
        repo.count_enrollments(flt),
        repo.count_enrollments(flt, enrolled=window),
        repo.count_enrollments(flt, completed=window),
    )
    return DashboardReport(
        filters=DashboardFilters(
            start_date=start,
            end_date=end,
            category_ids=list(category_ids),
            instructor_ids=list(instructor_ids),
        ),
        total_courses=total,
        published_courses=published,
        total_enrollments=enrollments,
        new_enrollments=new,
        completed_enrollments=completed,
        completion_rate=_rate(completed, new),
    )


def timeframe_window(timeframe: Timeframe, now: datetime) -> Window:
    if timeframe == "all":
        return Window(start=ALL_TIME_START, end=now)
    return Window(start=now - timedelta(days=TIMEFRAME_DAYS[timeframe]), end=now)


def previous_window(window: Window) -> Window:
    """The equal-length window that ends where ``window`` starts."""
    length = window.end - window.start
    return Window(start=window.start - length, end=window.start)


def change(current: int, previous: int) -> Change:
    percent = None
    if previous:
        percent = round_2((current - previous) / previous * 100)
    return Change(current=current, previous=previous, percent_change=percent)


async def _enrollment_section(
    repo: AnalyticsRepo, flt: CourseFilter, window: Window
) -> EnrollmentSection:
    total, new, completed = await asyncio.gather(
        repo.count_enrollments(flt),
        repo.count_enrollments(flt, enrolled=window),
        repo.count_enrollments(flt, completed=window),
    )
    return EnrollmentSection(total=total, new=new, completed=completed)


async def _course_section(
    repo: AnalyticsRepo, flt: CourseFilter, window: Window
) -> CourseSection:
    total, new, published = await asyncio.gather(
        repo.count_courses(flt),
        repo.count_courses(flt, created=window),
        repo.count_courses(flt, published_only=True),
    )
    return CourseSection(total=total, new=new, published=published)


async def _comparison(
    repo: AnalyticsRepo, flt: CourseFilter, window: Window
) -> Comparison:
    before = previous_window(window)
    enrolled_now, enrolled_before, created_now, created_before = await asyncio.gather(
        repo.count_enrollments(flt, enrolled=window),
        repo.count_enrollments(flt, enrolled=before),
        repo.count_courses(flt, created=window),
        repo.count_courses(flt, created=before),
    )
    return Comparison(
        new_enrollments=change(enrolled_now, enrolled_before),
        new_courses=change(created_now, created_before),
    )


async def _nothing() -> None:
    return None


async def build_timeframe_report(
    repo: AnalyticsRepo,
    *,
    timeframe: Timeframe,
    flt: CourseFilter,
    now: datetime,
    include_enrollments: bool = True,
    include_courses: bool = True,
    include_top_courses: bool = True,
    include_comparison: bool = True,
) -> TimeframeReport:
    window = timeframe_window(timeframe, now)
    with_comparison = include_comparison and timeframe != "all"

    enrollments, courses, top, comparison = await asyncio.gather(
        _enrollment_section(repo, flt, window) if include_enrollments else _nothing(),
        _course_section(repo, flt, window) if include_courses else _nothing(),
        repo.top_courses(flt, window, TOP_COURSES_LIMIT)
        if include_top_courses
        else _nothing(),
        _comparison(repo, flt, window) if with_comparison else _nothing(),
    )
    return TimeframeReport(
        timeframe=timeframe,
        start=window.start,
        end=window.end,
        enrollments=enrollments,
        courses=courses,
        top_courses=top,
        comparison=comparison,
    )
