from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Course:
    id: str
    title: str
    instructor_id: str
    description: str = ""
    status: str = "draft"  # draft|published|archived
    is_private: bool = False
    category: str | None = None
    level: str | None = None  # beginner|intermediate|advanced
    language: str | None = None
    price: float = 0.0
    rating: float | None = None
    featured: bool = False
    has_certificate: bool = False
    duration_minutes: int | None = None
    enrollment_count: int = 0
    created_at: datetime = field(default_factory=_now)

    @property
    def is_published(self) -> bool:
        return self.status == "published"


@dataclass(frozen=True, slots=True)
class Module:
    id: str
    course_id: str
    title: str
    position: int = 0
    description: str = ""
    created_at: datetime = field(default_factory=_now)


@dataclass(frozen=True, slots=True)
class Lesson:
    id: str
    module_id: str
    title: str
    description: str = ""
    duration_minutes: int | None = None
    created_at: datetime = field(default_factory=_now)


@dataclass(frozen=True, slots=True)
class Assignment:
    id: str
    module_id: str
    title: str
    points: float | None = None


@dataclass(frozen=True, slots=True)
class Quiz:
    id: str
    module_id: str
    title: str
    max_score: float | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """Projects hang off the course directly, not a module."""

    id: str
    course_id: str
    title: str
    points_value: float | None = None


@dataclass(frozen=True, slots=True)
class Discussion:
    id: str
    course_id: str
    author_id: str
    title: str
    content: str = ""
    comment_count: int = 0
    created_at: datetime = field(default_factory=_now)


@dataclass(frozen=True, slots=True)
class CourseStructure:
    """Static tree used for rate denominators (lessons, assignments)."""

    course: Course
    lesson_ids: tuple[str, ...] = ()
    assignment_ids: tuple[str, ...] = ()

    @property
    def total_lessons(self) -> int:
        return len(self.lesson_ids)
