"""PostgreSQL implementation of AnalyticsRepo."""

from __future__ import annotations

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.tables import CourseRow, EnrollmentRow
from app.models.reports import TopCourse
from app.repos.analytics_repo import CourseFilter, Window


def _course_conditions(flt: CourseFilter) -> list[ColumnElement[bool]]:
    conds: list[ColumnElement[bool]] = []
    if flt.category_ids:
        conds.append(CourseRow.category.in_(flt.category_ids))
    if flt.instructor_ids:
        conds.append(CourseRow.instructor_id.in_(flt.instructor_ids))
    if flt.course_id is not None:
        conds.append(CourseRow.id == flt.course_id)
    return conds


class PgAnalyticsRepo:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def count_courses(
        self,
        flt: CourseFilter,
        *,
        published_only: bool = False,
        created: Window | None = None,
    ) -> int:
        conds = _course_conditions(flt)
        if published_only:
            conds.append(CourseRow.status == "published")
        if created is not None:
            conds.append(CourseRow.created_at.between(created.start, created.end))
        stmt = select(func.count(CourseRow.id)).where(*conds)
        async with self._sessions() as session:
            return (await session.execute(stmt)).scalar_one()

    async def count_enrollments(
        self,
        flt: CourseFilter,
        *,
        enrolled: Window | None = None,
        completed: Window | None = None,
    ) -> int:
        conds = _course_conditions(flt)
        if enrolled is not None:
            conds.append(EnrollmentRow.enrolled_at.between(enrolled.start, enrolled.end))
        if completed is not None:
            conds.append(
                EnrollmentRow.completed_at.between(completed.start, completed.end)
            )
        stmt = (
            select(func.count())
            .select_from(EnrollmentRow)
            .join(CourseRow, CourseRow.id == EnrollmentRow.course_id)
            .where(*conds)
        )
        async with self._sessions() as session:
            return (await session.execute(stmt)).scalar_one()

    async def top_courses(
        self, flt: CourseFilter, enrolled: Window, limit: int
    ) -> list[TopCourse]:
        n = func.count().label("enrollments")
        stmt = (
            select(CourseRow.id, CourseRow.title, n)
            .join(EnrollmentRow, EnrollmentRow.course_id == CourseRow.id)
            .where(
                *_course_conditions(flt),
                EnrollmentRow.enrolled_at.between(enrolled.start, enrolled.end),
            )
            .group_by(CourseRow.id, CourseRow.title)
            .order_by(n.desc(), CourseRow.id)
            .limit(limit)
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).all()
        return [
            TopCourse(course_id=course_id, title=title, enrollments=count)
            for course_id, title, count in rows
        ]
