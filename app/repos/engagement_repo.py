from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import Protocol

from app.models.assessment import AssignmentSubmission
from app.models.course import CourseStructure
from app.models.enrollment import Enrollment, LessonView
from app.repos.memory_store import LmsDataset


class EngagementRepo(Protocol):
    """Time-windowed reads behind the instructor engagement report.

    Windows are inclusive at both ends: ``since <= t <= until``.
    """

    async def list_published_courses(
        self, instructor_id: str
    ) -> list[CourseStructure]: ...

    async def list_enrollments(
        self, course_ids: Collection[str], since: datetime, until: datetime
    ) -> list[Enrollment]: ...

    async def list_lesson_views(
        self, lesson_ids: Collection[str], since: datetime, until: datetime
    ) -> list[LessonView]: ...

    async def list_assignment_submissions(
        self, assignment_ids: Collection[str], since: datetime, until: datetime
    ) -> list[AssignmentSubmission]: ...


class InMemoryEngagementRepo:
    def __init__(self, data: LmsDataset) -> None:
        self._data = data

    async def list_published_courses(self, instructor_id: str) -> list[CourseStructure]:
        courses = sorted(
            (
                c
                for c in self._data.courses.values()
                if c.instructor_id == instructor_id and c.is_published
            ),
            key=lambda c: c.created_at,
        )
        return [
            CourseStructure(
                course=c,
                lesson_ids=tuple(self._data.lesson_ids_of(c.id)),
                assignment_ids=tuple(self._data.assignment_ids_of(c.id)),
            )
            for c in courses
        ]

    async def list_enrollments(
        self, course_ids: Collection[str], since: datetime, until: datetime
    ) -> list[Enrollment]:
        wanted = set(course_ids)
        return [
            e
            for e in self._data.enrollments
            if e.course_id in wanted and since <= e.enrolled_at <= until
        ]

    async def list_lesson_views(
        self, lesson_ids: Collection[str], since: datetime, until: datetime
    ) -> list[LessonView]:
        wanted = set(lesson_ids)
        return [
            v
            for v in self._data.lesson_views
            if v.lesson_id in wanted and since <= v.viewed_at <= until
        ]

    async def list_assignment_submissions(
        self, assignment_ids: Collection[str], since: datetime, until: datetime
    ) -> list[AssignmentSubmission]:
        wanted = set(assignment_ids)
        return [
            s
            for s in self._data.assignment_submissions
            if s.assignment_id in wanted and since <= s.submitted_at <= until
        ]
