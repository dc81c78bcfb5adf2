"""PostgreSQL implementation of EngagementRepo."""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.tables import (
    AssignmentRow,
    AssignmentSubmissionRow,
    CourseRow,
    EnrollmentRow,
    LessonRow,
    LessonViewRow,
    ModuleRow,
)
from app.models.assessment import AssignmentSubmission
from app.models.course import CourseStructure
from app.models.enrollment import Enrollment, LessonView
from app.repos.pg_gradebook_repo import row_to_assignment_submission, row_to_course


class PgEngagementRepo:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def list_published_courses(self, instructor_id: str) -> list[CourseStructure]:
        courses_stmt = (
            select(CourseRow)
            .where(CourseRow.instructor_id == instructor_id, CourseRow.status == "published")
            .order_by(CourseRow.created_at)
        )
        async with self._sessions() as session:
            courses = (await session.execute(courses_stmt)).scalars().all()
            if not courses:
                return []
            course_ids = [c.id for c in courses]
            lessons = (
                await session.execute(
                    select(ModuleRow.course_id, LessonRow.id)
                    .join(ModuleRow, ModuleRow.id == LessonRow.module_id)
                    .where(ModuleRow.course_id.in_(course_ids))
                )
            ).all()
            assignments = (
                await session.execute(
                    select(ModuleRow.course_id, AssignmentRow.id)
                    .join(ModuleRow, ModuleRow.id == AssignmentRow.module_id)
                    .where(ModuleRow.course_id.in_(course_ids))
                )
            ).all()

        lessons_by_course: dict[str, list[str]] = {cid: [] for cid in course_ids}
        for course_id, lesson_id in lessons:
            lessons_by_course[course_id].append(lesson_id)
        assignments_by_course: dict[str, list[str]] = {cid: [] for cid in course_ids}
        for course_id, assignment_id in assignments:
            assignments_by_course[course_id].append(assignment_id)

        return [
            CourseStructure(
                course=row_to_course(c),
                lesson_ids=tuple(lessons_by_course[c.id]),
                assignment_ids=tuple(assignments_by_course[c.id]),
            )
            for c in courses
        ]

    async def list_enrollments(
        self, course_ids: Collection[str], since: datetime, until: datetime
    ) -> list[Enrollment]:
        if not course_ids:
            return []
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.course_id.in_(list(course_ids)),
            EnrollmentRow.enrolled_at.between(since, until),
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [
            Enrollment(
                student_id=r.student_id,
                course_id=r.course_id,
                enrolled_at=r.enrolled_at,
                status=r.status,
                completed_at=r.completed_at,
            )
            for r in rows
        ]

    async def list_lesson_views(
        self, lesson_ids: Collection[str], since: datetime, until: datetime
    ) -> list[LessonView]:
        if not lesson_ids:
            return []
        stmt = select(LessonViewRow).where(
            LessonViewRow.lesson_id.in_(list(lesson_ids)),
            LessonViewRow.viewed_at.between(since, until),
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [
            LessonView(student_id=r.student_id, lesson_id=r.lesson_id, viewed_at=r.viewed_at)
            for r in rows
        ]

    async def list_assignment_submissions(
        self, assignment_ids: Collection[str], since: datetime, until: datetime
    ) -> list[AssignmentSubmission]:
        if not assignment_ids:
            return []
        stmt = (
            select(AssignmentSubmissionRow, AssignmentRow)
            .join(AssignmentRow, AssignmentRow.id == AssignmentSubmissionRow.assignment_id)
            .where(
                AssignmentSubmissionRow.assignment_id.in_(list(assignment_ids)),
                AssignmentSubmissionRow.submitted_at.between(since, until),
            )
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).all()
        return [row_to_assignment_submission(sub, a) for sub, a in rows]
