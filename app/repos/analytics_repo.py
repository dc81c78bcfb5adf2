from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from app.models.course import Course
from app.models.reports import TopCourse
from app.repos.memory_store import LmsDataset


@dataclass(frozen=True, slots=True)
class CourseFilter:
    """Narrows admin analytics to a slice of the catalog.

    Empty tuples and ``None`` mean "no restriction".
    """

    category_ids: tuple[str, ...] = ()
    instructor_ids: tuple[str, ...] = ()
    course_id: str | None = None

    def matches(self, course: Course) -> bool:
        if self.category_ids and course.category not in self.category_ids:
            return False
        if self.instructor_ids and course.instructor_id not in self.instructor_ids:
            return False
        if self.course_id is not None and course.id != self.course_id:
            return False
        return True


@dataclass(frozen=True, slots=True)
class Window:
    start: datetime
    end: datetime

    def __contains__(self, moment: datetime | None) -> bool:
        return moment is not None and self.start <= moment <= self.end


class AnalyticsRepo(Protocol):
    async def count_courses(
        self,
        flt: CourseFilter,
        *,
        published_only: bool = False,
        created: Window | None = None,
    ) -> int: ...

    async def count_enrollments(
        self,
        flt: CourseFilter,
        *,
        enrolled: Window | None = None,
        completed: Window | None = None,
    ) -> int: ...

    async def top_courses(
        self, flt: CourseFilter, enrolled: Window, limit: int
    ) -> list[TopCourse]: ...


class InMemoryAnalyticsRepo:
    def __init__(self, data: LmsDataset) -> None:
        self._data = data

    def _course_ids(self, flt: CourseFilter) -> set[str]:
        return {c.id for c in self._data.courses.values() if flt.matches(c)}

    async def count_courses(
        self,
        flt: CourseFilter,
        *,
        published_only: bool = False,
        created: Window | None = None,
    ) -> int:
        total = 0
        for course in self._data.courses.values():
            if not flt.matches(course):
                continue
            if published_only and not course.is_published:
                continue
            if created is not None and course.created_at not in created:
                continue
            total += 1
        return total

    async def count_enrollments(
        self,
        flt: CourseFilter,
        *,
        enrolled: Window | None = None,
        completed: Window | None = None,
    ) -> int:
        course_ids = self._course_ids(flt)
        total = 0
        for e in self._data.enrollments:
            if e.course_id not in course_ids:
                continue
            if enrolled is not None and e.enrolled_at not in enrolled:
                continue
            if completed is not None and e.completed_at not in completed:
                continue
            total += 1
        return total

    async def top_courses(
        self, flt: CourseFilter, enrolled: Window, limit: int
    ) -> list[TopCourse]:
        course_ids = self._course_ids(flt)
        counts: dict[str, int] = {}
        for e in self._data.enrollments:
            if e.course_id in course_ids and e.enrolled_at in enrolled:
                counts[e.course_id] = counts.get(e.course_id, 0) + 1
        ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
        return [
            TopCourse(
                course_id=course_id,
                title=self._data.courses[course_id].title,
                enrollments=n,
            )
            for course_id, n in ranked
        ]
