from __future__ import annotations

from collections.abc import Collection
from typing import Protocol

from app.models.assessment import AssignmentSubmission, ProjectSubmission, QuizAttempt
from app.models.course import Course
from app.models.enrollment import EnrolledStudent
from app.repos.memory_store import LmsDataset


class GradebookRepo(Protocol):
    """Reads behind the per-course grade report."""

    async def get_course(self, course_id: str) -> Course | None: ...

    async def list_enrollments(self, course_id: str) -> list[EnrolledStudent]:
        """Enrolled students with profile fields; dropped enrollments excluded."""
        ...

    async def list_project_submissions(
        self, course_id: str, student_ids: Collection[str]
    ) -> list[ProjectSubmission]: ...

    async def list_quiz_attempts(
        self, course_id: str, student_ids: Collection[str]
    ) -> list[QuizAttempt]: ...

    async def list_assignment_submissions(
        self, course_id: str, student_ids: Collection[str]
    ) -> list[AssignmentSubmission]: ...


class InMemoryGradebookRepo:
    def __init__(self, data: LmsDataset) -> None:
        self._data = data

    async def get_course(self, course_id: str) -> Course | None:
        return self._data.courses.get(course_id)

    async def list_enrollments(self, course_id: str) -> list[EnrolledStudent]:
        rows = []
        for e in self._data.enrollments:
            if e.course_id != course_id or e.status == "dropped":
                continue
            student = self._data.users.get(e.student_id)
            if student is None:
                continue
            rows.append(
                EnrolledStudent(
                    student_id=student.id,
                    name=student.name,
                    email=student.email,
                    enrolled_at=e.enrolled_at,
                    status=e.status,
                )
            )
        rows.sort(key=lambda r: r.enrolled_at)
        return rows

    async def list_project_submissions(
        self, course_id: str, student_ids: Collection[str]
    ) -> list[ProjectSubmission]:
        wanted = set(student_ids)
        return [
            s
            for s in self._data.project_submissions
            if s.student_id in wanted
            and s.project_id in self._data.projects
            and self._data.projects[s.project_id].course_id == course_id
        ]

    async def list_quiz_attempts(
        self, course_id: str, student_ids: Collection[str]
    ) -> list[QuizAttempt]:
        wanted = set(student_ids)
        quiz_ids = self._data.quiz_ids_of(course_id)
        return [
            a
            for a in self._data.quiz_attempts
            if a.student_id in wanted and a.quiz_id in quiz_ids
        ]

    async def list_assignment_submissions(
        self, course_id: str, student_ids: Collection[str]
    ) -> list[AssignmentSubmission]:
        wanted = set(student_ids)
        assignment_ids = set(self._data.assignment_ids_of(course_id))
        return [
            s
            for s in self._data.assignment_submissions
            if s.student_id in wanted and s.assignment_id in assignment_ids
        ]
