"""PostgreSQL implementation of GradebookRepo.

Each method opens its own short-lived session so the grade report can
gather the three submission reads concurrently.
"""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.tables import (
    AssignmentRow,
    AssignmentSubmissionRow,
    CourseRow,
    EnrollmentRow,
    ModuleRow,
    ProjectRow,
    ProjectSubmissionRow,
    QuizAttemptRow,
    QuizRow,
    UserRow,
)
from app.models.assessment import AssignmentSubmission, ProjectSubmission, QuizAttempt
from app.models.course import Course
from app.models.enrollment import EnrolledStudent


class PgGradebookRepo:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def get_course(self, course_id: str) -> Course | None:
        stmt = select(CourseRow).where(CourseRow.id == course_id)
        async with self._sessions() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return row_to_course(row)

    async def list_enrollments(self, course_id: str) -> list[EnrolledStudent]:
        stmt = (
            select(EnrollmentRow, UserRow)
            .join(UserRow, UserRow.id == EnrollmentRow.student_id)
            .where(
                EnrollmentRow.course_id == course_id,
                EnrollmentRow.status != "dropped",
            )
            .order_by(EnrollmentRow.enrolled_at)
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).all()
        return [
            EnrolledStudent(
                student_id=user.id,
                name=user.name,
                email=user.email,
                enrolled_at=enrollment.enrolled_at,
                status=enrollment.status,
            )
            for enrollment, user in rows
        ]

    async def list_project_submissions(
        self, course_id: str, student_ids: Collection[str]
    ) -> list[ProjectSubmission]:
        if not student_ids:
            return []
        stmt = (
            select(ProjectSubmissionRow, ProjectRow)
            .join(ProjectRow, ProjectRow.id == ProjectSubmissionRow.project_id)
            .where(
                ProjectRow.course_id == course_id,
                ProjectSubmissionRow.student_id.in_(list(student_ids)),
            )
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).all()
        return [
            ProjectSubmission(
                id=sub.id,
                student_id=sub.student_id,
                project_id=project.id,
                title=project.title,
                grade=sub.grade,
                points_value=project.points_value,
                status=sub.status,
                submitted_at=sub.submitted_at,
                graded_at=sub.graded_at,
            )
            for sub, project in rows
        ]

    async def list_quiz_attempts(
        self, course_id: str, student_ids: Collection[str]
    ) -> list[QuizAttempt]:
        if not student_ids:
            return []
        stmt = (
            select(QuizAttemptRow, QuizRow)
            .join(QuizRow, QuizRow.id == QuizAttemptRow.quiz_id)
            .join(ModuleRow, ModuleRow.id == QuizRow.module_id)
            .where(
                ModuleRow.course_id == course_id,
                QuizAttemptRow.student_id.in_(list(student_ids)),
            )
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).all()
        return [
            QuizAttempt(
                id=attempt.id,
                student_id=attempt.student_id,
                quiz_id=quiz.id,
                title=quiz.title,
                score=attempt.score,
                max_score=quiz.max_score,
                status=attempt.status,
                completed_at=attempt.completed_at,
            )
            for attempt, quiz in rows
        ]

    async def list_assignment_submissions(
        self, course_id: str, student_ids: Collection[str]
    ) -> list[AssignmentSubmission]:
        if not student_ids:
            return []
        stmt = (
            select(AssignmentSubmissionRow, AssignmentRow)
            .join(AssignmentRow, AssignmentRow.id == AssignmentSubmissionRow.assignment_id)
            .join(ModuleRow, ModuleRow.id == AssignmentRow.module_id)
            .where(
                ModuleRow.course_id == course_id,
                AssignmentSubmissionRow.student_id.in_(list(student_ids)),
            )
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).all()
        return [row_to_assignment_submission(sub, assignment) for sub, assignment in rows]


def row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        instructor_id=row.instructor_id,
        description=row.description or "",
        status=row.status,
        is_private=row.is_private,
        category=row.category,
        level=row.level,
        language=row.language,
        price=row.price,
        rating=row.rating,
        featured=row.featured,
        has_certificate=row.has_certificate,
        duration_minutes=row.duration_minutes,
        enrollment_count=row.enrollment_count,
        created_at=row.created_at,
    )


def row_to_assignment_submission(
    sub: AssignmentSubmissionRow, assignment: AssignmentRow
) -> AssignmentSubmission:
    return AssignmentSubmission(
        id=sub.id,
        student_id=sub.student_id,
        assignment_id=assignment.id,
        title=assignment.title,
        grade=sub.grade,
        points=assignment.points,
        status=sub.status,
        submitted_at=sub.submitted_at,
        graded_at=sub.graded_at,
    )
