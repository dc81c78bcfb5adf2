"""30-day engagement report for an instructor's published courses.

Calendar-day buckets and heatmap cells are computed in the configured
report timezone (``REPORT_TIMEZONE``), not in UTC.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence
from datetime import date, datetime, timedelta, tzinfo

from app.models.assessment import AssignmentSubmission
from app.models.course import CourseStructure
from app.models.enrollment import Enrollment, LessonView
from app.models.reports import (
    CourseEngagement,
    EngagementMetrics,
    EngagementReport,
    HeatmapCell,
    TimeSeriesPoint,
)
from app.repos.engagement_repo import EngagementRepo
from app.services.grading import round_2, round_half_up

logger = logging.getLogger(__name__)

WINDOW_DAYS = 30
ACTIVE_WINDOW_DAYS = 90

# Legacy normalization: a day with this many lesson views reads as 100%.
VIEWS_PER_FULL_DAY = 10

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _local_day(moment: datetime, tz: tzinfo) -> date:
    return moment.astimezone(tz).date()


def _bounded_percent(numerator: float, denominator: float) -> int:
    if denominator <= 0:
        return 0
    return min(round_half_up(numerator / denominator * 100), 100)


def _mean_grade(submissions: Sequence[AssignmentSubmission]) -> float:
    grades = [s.grade for s in submissions if s.grade is not None]
    if not grades:
        return 0.0
    return round_2(sum(grades) / len(grades))


def time_series(
    today: date,
    enrollments: Sequence[Enrollment],
    views: Sequence[LessonView],
    submissions: Sequence[AssignmentSubmission],
    tz: tzinfo,
) -> list[TimeSeriesPoint]:
    """One point per calendar day, today first, ``WINDOW_DAYS`` long."""
    enrolled = Counter(_local_day(e.enrolled_at, tz) for e in enrollments)
    viewed = Counter(_local_day(v.viewed_at, tz) for v in views)
    submitted = Counter(_local_day(s.submitted_at, tz) for s in submissions)

    points = []
    for offset in range(WINDOW_DAYS):
        day = today - timedelta(days=offset)
        n_views = viewed[day]
        points.append(
            TimeSeriesPoint(
                date=day,
                students=enrolled[day],
                completion=_bounded_percent(n_views, VIEWS_PER_FULL_DAY),
                engagement=n_views,
                assignments=submitted[day],
            )
        )
    return points


def heatmap(views: Sequence[LessonView], tz: tzinfo) -> list[HeatmapCell]:
    """Always 24 x 7 cells, hour-major, Monday first within each hour."""
    counts = Counter()
    for v in views:
        local = v.viewed_at.astimezone(tz)
        counts[(local.weekday(), local.hour)] += 1
    return [
        HeatmapCell(day=WEEKDAYS[wd], hour=hour, value=counts[(wd, hour)])
        for hour in range(24)
        for wd in range(7)
    ]


def course_stats(
    courses: Sequence[CourseStructure],
    active_enrollments: Sequence[Enrollment],
    views: Sequence[LessonView],
    submissions: Sequence[AssignmentSubmission],
) -> list[CourseEngagement]:
    viewed_lessons = {v.lesson_id for v in views}
    stats = []
    for structure in courses:
        course_id = structure.course.id
        students = {
            e.student_id
            for e in active_enrollments
            if e.course_id == course_id and e.status != "dropped"
        }
        assignment_ids = set(structure.assignment_ids)
        seen = sum(1 for lesson_id in structure.lesson_ids if lesson_id in viewed_lessons)
        stats.append(
            CourseEngagement(
                course_id=course_id,
                title=structure.course.title,
                students=len(students),
                total_lessons=structure.total_lessons,
                completion_rate=_bounded_percent(seen, structure.total_lessons),
                average_assignment_score=_mean_grade(
                    [s for s in submissions if s.assignment_id in assignment_ids]
                ),
            )
        )
    return stats


def summarize(
    courses: Sequence[CourseStructure],
    active_enrollments: Sequence[Enrollment],
    views: Sequence[LessonView],
    submissions: Sequence[AssignmentSubmission],
    *,
    now: datetime,
    tz: tzinfo,
) -> EngagementReport:
    """Fold one snapshot into the report.  Pure."""
    window_start = now - timedelta(days=WINDOW_DAYS)
    recent_enrollments = [e for e in active_enrollments if e.enrolled_at >= window_start]

    per_course = course_stats(courses, active_enrollments, views, submissions)
    possible_engagement = sum(c.students * c.total_lessons for c in per_course)

    return EngagementReport(
        time_series=time_series(
            _local_day(now, tz), recent_enrollments, views, submissions, tz
        ),
        heatmap=heatmap(views, tz),
        course_stats=per_course,
        metrics=EngagementMetrics(
            total_students=len({e.student_id for e in recent_enrollments}),
            total_courses=len(courses),
            course_completion=_bounded_percent(len(views), possible_engagement),
            average_engagement=round_half_up(
                len(views) / max(len(recent_enrollments), 1) * 100
            ),
            assignments_submitted=len(submissions),
            average_assignment_score=_mean_grade(submissions),
        ),
        generated_at=now,
    )


async def build_engagement_report(
    repo: EngagementRepo, instructor_id: str, *, now: datetime, tz: tzinfo
) -> EngagementReport:
    courses = await repo.list_published_courses(instructor_id)
    course_ids = [c.course.id for c in courses]
    lesson_ids = [lid for c in courses for lid in c.lesson_ids]
    assignment_ids = [aid for c in courses for aid in c.assignment_ids]

    window_start = now - timedelta(days=WINDOW_DAYS)
    enrollments, views, submissions = await asyncio.gather(
        repo.list_enrollments(course_ids, now - timedelta(days=ACTIVE_WINDOW_DAYS), now),
        repo.list_lesson_views(lesson_ids, window_start, now),
        repo.list_assignment_submissions(assignment_ids, window_start, now),
    )
    logger.debug(
        "Engagement instructor=%s courses=%d enrollments=%d views=%d submissions=%d",
        instructor_id,
        len(courses),
        len(enrollments),
        len(views),
        len(submissions),
    )
    return summarize(courses, enrollments, views, submissions, now=now, tz=tz)
