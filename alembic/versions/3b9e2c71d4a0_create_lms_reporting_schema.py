"""create lms reporting schema

Revision ID: 3b9e2c71d4a0
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9e2c71d4a0"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ID = sa.String(length=64)


def _ts(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", ID, primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="student"),
        sa.Column("bio", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "expertise",
            postgresql.ARRAY(sa.String()),
            nullable=False,
            server_default="{}",
        ),
        sa.Column("rating", sa.Float(), nullable=True),
        _ts("created_at"),
    )

    op.create_table(
        "courses",
        sa.Column("id", ID, primary_key=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("instructor_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="draft"),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("category", sa.String(length=128), nullable=True),
        sa.Column("level", sa.String(length=32), nullable=True),
        sa.Column("language", sa.String(length=32), nullable=True),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "has_certificate", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("enrollment_count", sa.Integer(), nullable=False, server_default="0"),
        _ts("created_at"),
    )
    op.create_index(
        "ix_courses_instructor_status", "courses", ["instructor_id", "status"]
    )

    op.create_table(
        "modules",
        sa.Column("id", ID, primary_key=True),
        sa.Column("course_id", ID, sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        _ts("created_at"),
    )
    op.create_index("ix_modules_course_id", "modules", ["course_id"])

    op.create_table(
        "lessons",
        sa.Column("id", ID, primary_key=True),
        sa.Column("module_id", ID, sa.ForeignKey("modules.id"), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        _ts("created_at"),
    )
    op.create_index("ix_lessons_module_id", "lessons", ["module_id"])

    op.create_table(
        "lesson_views",
        sa.Column("student_id", ID, sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("lesson_id", ID, sa.ForeignKey("lessons.id"), primary_key=True),
        _ts("viewed_at"),
    )
    op.create_index(
        "ix_lesson_views_lesson_viewed", "lesson_views", ["lesson_id", "viewed_at"]
    )

    op.create_table(
        "assignments",
        sa.Column("id", ID, primary_key=True),
        sa.Column("module_id", ID, sa.ForeignKey("modules.id"), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("points", sa.Float(), nullable=True),
    )
    op.create_index("ix_assignments_module_id", "assignments", ["module_id"])

    op.create_table(
        "assignment_submissions",
        sa.Column("id", ID, primary_key=True),
        sa.Column("assignment_id", ID, sa.ForeignKey("assignments.id"), nullable=False),
        sa.Column("student_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("grade", sa.Float(), nullable=True),
        sa.Column(
            "status", sa.String(length=32), nullable=False, server_default="SUBMITTED"
        ),
        _ts("submitted_at"),
        _ts("graded_at", nullable=True),
    )
    op.create_index(
        "ix_assignment_submissions_assignment_submitted",
        "assignment_submissions",
        ["assignment_id", "submitted_at"],
    )

    op.create_table(
        "quizzes",
        sa.Column("id", ID, primary_key=True),
        sa.Column("module_id", ID, sa.ForeignKey("modules.id"), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("max_score", sa.Float(), nullable=True),
    )
    op.create_index("ix_quizzes_module_id", "quizzes", ["module_id"])

    op.create_table(
        "quiz_attempts",
        sa.Column("id", ID, primary_key=True),
        sa.Column("quiz_id", ID, sa.ForeignKey("quizzes.id"), nullable=False),
        sa.Column("student_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column(
            "status", sa.String(length=32), nullable=False, server_default="IN_PROGRESS"
        ),
        _ts("completed_at", nullable=True),
    )

    op.create_table(
        "projects",
        sa.Column("id", ID, primary_key=True),
        sa.Column("course_id", ID, sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("points_value", sa.Float(), nullable=True),
    )
    op.create_index("ix_projects_course_id", "projects", ["course_id"])

    op.create_table(
        "project_submissions",
        sa.Column("id", ID, primary_key=True),
        sa.Column("project_id", ID, sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("student_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("grade", sa.Float(), nullable=True),
        sa.Column(
            "status", sa.String(length=32), nullable=False, server_default="SUBMITTED"
        ),
        _ts("submitted_at"),
        _ts("graded_at", nullable=True),
    )

    op.create_table(
        "enrollments",
        sa.Column("student_id", ID, sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("course_id", ID, sa.ForeignKey("courses.id"), primary_key=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        _ts("enrolled_at"),
        _ts("completed_at", nullable=True),
    )
    op.create_index(
        "ix_enrollments_course_enrolled", "enrollments", ["course_id", "enrolled_at"]
    )

    op.create_table(
        "discussions",
        sa.Column("id", ID, primary_key=True),
        sa.Column("course_id", ID, sa.ForeignKey("courses.id"), nullable=False),
        sa.Column("author_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        _ts("created_at"),
    )
    op.create_index("ix_discussions_course_id", "discussions", ["course_id"])

    op.create_table(
        "discussion_comments",
        sa.Column("id", ID, primary_key=True),
        sa.Column("discussion_id", ID, sa.ForeignKey("discussions.id"), nullable=False),
        sa.Column("author_id", ID, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        _ts("created_at"),
    )
    op.create_index(
        "ix_discussion_comments_discussion_id", "discussion_comments", ["discussion_id"]
    )

    op.create_table(
        "access_rules",
        sa.Column("course_id", ID, sa.ForeignKey("courses.id"), primary_key=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "requires_enrollment", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "allowed_roles",
            postgresql.ARRAY(sa.String()),
            nullable=False,
            server_default="{}",
        ),
        sa.Column("rules_json", sa.Text(), nullable=False, server_default="[]"),
        _ts("updated_at"),
    )

    op.create_table(
        "privacy_settings",
        sa.Column("user_id", ID, sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("settings_json", sa.Text(), nullable=False),
        _ts("updated_at"),
    )


def downgrade() -> None:
    for table in (
        "privacy_settings",
        "access_rules",
        "discussion_comments",
        "discussions",
        "enrollments",
        "project_submissions",
        "projects",
        "quiz_attempts",
        "quizzes",
        "assignment_submissions",
        "assignments",
        "lesson_views",
        "lessons",
        "modules",
        "courses",
        "users",
    ):
        op.drop_table(table)
