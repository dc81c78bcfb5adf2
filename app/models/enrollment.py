from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Enrollment:
    """One per (student, course) pair."""

    student_id: str
    course_id: str
    enrolled_at: datetime
    status: str = "active"  # active|completed|dropped
    completed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class EnrolledStudent:
    """Enrollment joined with the student's profile fields."""

    student_id: str
    name: str
    email: str
    enrolled_at: datetime
    status: str = "active"


@dataclass(frozen=True, slots=True)
class LessonView:
    """Engagement proxy: one row per (student, lesson), stamped on last view."""

    student_id: str
    lesson_id: str
    viewed_at: datetime
