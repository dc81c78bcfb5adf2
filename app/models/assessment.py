"""Assessment records, one variant per assessment kind.

The three variants share a ``kind`` discriminant.  Each carries its own
max-score source (``points_value``, ``max_score``, ``points``) and status
vocabulary, denormalized from the parent assessment by the repo so that
grading never needs a second lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, TypeAlias

GRADED_PROJECT_STATUSES = frozenset({"APPROVED", "GRADED"})


@dataclass(frozen=True, slots=True)
class ProjectSubmission:
    id: str
    student_id: str
    project_id: str
    title: str
    grade: float | None
    points_value: float | None
    status: str  # SUBMITTED|APPROVED|GRADED|REJECTED
    submitted_at: datetime
    graded_at: datetime | None = None
    kind: Literal["project"] = "project"


@dataclass(frozen=True, slots=True)
class QuizAttempt:
    id: str
    student_id: str
    quiz_id: str
    title: str
    score: float | None
    max_score: float | None
    status: str  # IN_PROGRESS|COMPLETED
    completed_at: datetime | None = None
    kind: Literal["quiz"] = "quiz"


@dataclass(frozen=True, slots=True)
class AssignmentSubmission:
    id: str
    student_id: str
    assignment_id: str
    title: str
    grade: float | None
    points: float | None
    status: str  # SUBMITTED|GRADED|RETURNED
    submitted_at: datetime
    graded_at: datetime | None = None
    kind: Literal["assignment"] = "assignment"


AssessmentRecord: TypeAlias = ProjectSubmission | QuizAttempt | AssignmentSubmission
