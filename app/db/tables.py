"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in app/models/.
Repos convert between SQLAlchemy rows and domain dataclasses; nothing
outside app/repos/pg_*.py should touch a Row class.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, MappedColumn, mapped_column

from app.db.engine import Base

_ID = String(64)


def _ts(nullable: bool = False) -> MappedColumn[Any]:
    return mapped_column(DateTime(timezone=True), nullable=nullable)


# --- People ---


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(
        String(32), nullable=False, default="student"
    )  # admin|instructor|mentor|student
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    expertise: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = _ts()


# --- Course structure ---


class CourseRow(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    instructor_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("users.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="draft"
    )  # draft|published|archived
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True)
    level: Mapped[str | None] = mapped_column(String(32), nullable=True)
    language: Mapped[str | None] = mapped_column(String(32), nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_certificate: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    enrollment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = _ts()

    __table_args__ = (Index("ix_courses_instructor_status", "instructor_id", "status"),)


class ModuleRow(Base):
    __tablename__ = "modules"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    course_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("courses.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = _ts()


class LessonRow(Base):
    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    module_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("modules.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = _ts()


class LessonViewRow(Base):
    __tablename__ = "lesson_views"

    student_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("users.id"), primary_key=True
    )
    lesson_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("lessons.id"), primary_key=True
    )
    viewed_at: Mapped[datetime] = _ts()

    __table_args__ = (Index("ix_lesson_views_lesson_viewed", "lesson_id", "viewed_at"),)


# --- Assessments ---


class AssignmentRow(Base):
    __tablename__ = "assignments"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    module_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("modules.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    points: Mapped[float | None] = mapped_column(Float, nullable=True)


class AssignmentSubmissionRow(Base):
    __tablename__ = "assignment_submissions"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    assignment_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("assignments.id"), nullable=False
    )
    student_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("users.id"), nullable=False
    )
    grade: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="SUBMITTED"
    )  # SUBMITTED|GRADED|RETURNED
    submitted_at: Mapped[datetime] = _ts()
    graded_at: Mapped[datetime | None] = _ts(nullable=True)

    __table_args__ = (
        Index("ix_assignment_submissions_assignment_submitted", "assignment_id", "submitted_at"),
    )


class QuizRow(Base):
    __tablename__ = "quizzes"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    module_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("modules.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    max_score: Mapped[float | None] = mapped_column(Float, nullable=True)


class QuizAttemptRow(Base):
    __tablename__ = "quiz_attempts"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    quiz_id: Mapped[str] = mapped_column(_ID, ForeignKey("quizzes.id"), nullable=False)
    student_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("users.id"), nullable=False
    )
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="IN_PROGRESS"
    )  # IN_PROGRESS|COMPLETED
    completed_at: Mapped[datetime | None] = _ts(nullable=True)


class ProjectRow(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    course_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("courses.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    points_value: Mapped[float | None] = mapped_column(Float, nullable=True)


class ProjectSubmissionRow(Base):
    __tablename__ = "project_submissions"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("projects.id"), nullable=False
    )
    student_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("users.id"), nullable=False
    )
    grade: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="SUBMITTED"
    )  # SUBMITTED|APPROVED|GRADED|REJECTED
    submitted_at: Mapped[datetime] = _ts()
    graded_at: Mapped[datetime | None] = _ts(nullable=True)


# --- Enrollment and community ---


class EnrollmentRow(Base):
    __tablename__ = "enrollments"

    student_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("users.id"), primary_key=True
    )
    course_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("courses.id"), primary_key=True
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="active"
    )  # active|completed|dropped
    enrolled_at: Mapped[datetime] = _ts()
    completed_at: Mapped[datetime | None] = _ts(nullable=True)

    __table_args__ = (Index("ix_enrollments_course_enrolled", "course_id", "enrolled_at"),)


class DiscussionRow(Base):
    __tablename__ = "discussions"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    course_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("courses.id"), nullable=False, index=True
    )
    author_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("users.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = _ts()


class DiscussionCommentRow(Base):
    __tablename__ = "discussion_comments"

    id: Mapped[str] = mapped_column(_ID, primary_key=True)
    discussion_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("discussions.id"), nullable=False, index=True
    )
    author_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("users.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _ts()


# --- Settings written by this service ---


class AccessRuleRow(Base):
    """One row per course; the rule list is stored as a JSON document."""

    __tablename__ = "access_rules"

    course_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("courses.id"), primary_key=True
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    requires_enrollment: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    allowed_roles: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    rules_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    updated_at: Mapped[datetime] = _ts()


class PrivacySettingsRow(Base):
    __tablename__ = "privacy_settings"

    user_id: Mapped[str] = mapped_column(
        _ID, ForeignKey("users.id"), primary_key=True
    )
    settings_json: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = _ts()
