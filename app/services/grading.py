"""Per-course grade report.

A student's overall grade is summed earned points over summed possible
points across every scored project, quiz and assignment.  It is NOT an
average of per-item or per-category percentages; unscored items and items
without a positive maximum stay out of both sums.

Class-level category averages are an average of per-student averages (the
mean, across students with at least one item in the category, of that
student's mean item percentage).  That differs from a pooled mean.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from app.models.assessment import (
    GRADED_PROJECT_STATUSES,
    AssignmentSubmission,
    ProjectSubmission,
    QuizAttempt,
)
from app.models.course import Course
from app.models.enrollment import EnrolledStudent
from app.models.reports import (
    ActivityEntry,
    AssessmentCategory,
    CategoryCounts,
    ClassAnalytics,
    CourseInfo,
    GradedItem,
    GradeReport,
    LetterGrade,
    StudentGrade,
    StudentPerformance,
)
from app.repos.gradebook_repo import GradebookRepo

logger = logging.getLogger(__name__)

# (lower bound, letter, GPA points), highest first.  Total over [0, 100].
GRADE_SCALE: tuple[tuple[int, LetterGrade, float], ...] = (
    (90, "A", 4.0),
    (80, "B", 3.0),
    (70, "C", 2.0),
    (60, "D", 1.0),
    (0, "F", 0.0),
)

# Display weights only; the overall grade is an unweighted point sum.
CATEGORY_WEIGHTS = {"Projects": 50, "Quizzes": 30, "Assignments": 20}

TOP_PERFORMERS = 5
STRUGGLING_LIMIT = 5
STRUGGLING_BELOW = 70
RECENT_PER_SOURCE = 5
RECENT_TOTAL = 10


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def round_2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def percentage(score: float | None, max_score: float | None) -> int:
    """Integer percent, 0 when either side is missing or the max is not positive."""
    if score is None or max_score is None or max_score <= 0:
        return 0
    return round_half_up(100 * score / max_score)


def _scale_entry(pct: float) -> tuple[int, LetterGrade, float]:
    for entry in GRADE_SCALE:
        if pct >= entry[0]:
            return entry
    return GRADE_SCALE[-1]


def letter_grade(pct: float) -> LetterGrade:
    return _scale_entry(pct)[1]


def gpa(pct: float) -> float:
    return _scale_entry(pct)[2]


# ---------------------------------------------------------------------------
# Per-item normalization
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _Scored:
    """An assessment record reduced to what the folds need."""

    item: GradedItem
    raw_percent: float | None  # unrounded, None when unscored

    @property
    def counts_toward_total(self) -> bool:
        return self.item.score is not None and self.item.max_score > 0


def _raw_percent(score: float | None, max_score: float) -> float | None:
    if score is None:
        return None
    if max_score <= 0:
        return 0.0
    return 100 * score / max_score


def _project_item(sub: ProjectSubmission) -> _Scored:
    graded = sub.status in GRADED_PROJECT_STATUSES and sub.grade is not None
    score = sub.grade if graded else None
    max_score = sub.points_value or 0
    pct = percentage(score, max_score)
    return _Scored(
        item=GradedItem(
            id=sub.project_id,
            title=sub.title,
            score=score,
            max_score=max_score,
            percentage=pct,
            letter_grade=letter_grade(pct),
            status="graded" if graded else "pending",
            submitted_at=sub.submitted_at,
            graded_at=sub.graded_at,
        ),
        raw_percent=_raw_percent(score, max_score),
    )


def _quiz_item(attempt: QuizAttempt) -> _Scored:
    max_score = attempt.max_score or 0
    pct = percentage(attempt.score, max_score)
    return _Scored(
        item=GradedItem(
            id=attempt.quiz_id,
            title=attempt.title,
            score=attempt.score,
            max_score=max_score,
            percentage=pct,
            letter_grade=letter_grade(pct),
            submitted_at=attempt.completed_at,
        ),
        raw_percent=_raw_percent(attempt.score, max_score),
    )


def _assignment_item(sub: AssignmentSubmission) -> _Scored:
    graded = sub.grade is not None
    max_score = sub.points or 0
    pct = percentage(sub.grade, max_score)
    return _Scored(
        item=GradedItem(
            id=sub.assignment_id,
            title=sub.title,
            score=sub.grade,
            max_score=max_score,
            percentage=pct,
            letter_grade=letter_grade(pct),
            status="graded" if graded else "pending",
            submitted_at=sub.submitted_at,
            graded_at=sub.graded_at,
        ),
        raw_percent=_raw_percent(sub.grade, max_score),
    )


@dataclass(slots=True)
class _StudentWork:
    student: EnrolledStudent
    projects: list[_Scored] = field(default_factory=list)
    quizzes: list[_Scored] = field(default_factory=list)
    assignments: list[_Scored] = field(default_factory=list)

    def category(self, name: str) -> list[_Scored]:
        if name == "Projects":
            return self.projects
        if name == "Quizzes":
            return self.quizzes
        if name == "Assignments":
            return self.assignments
        raise ValueError(f"unknown category {name!r}")

    def all_items(self) -> Iterable[_Scored]:
        yield from self.projects
        yield from self.quizzes
        yield from self.assignments

    def pending_count(self) -> int:
        return sum(
            1 for s in (*self.projects, *self.assignments) if s.item.status == "pending"
        )


# ---------------------------------------------------------------------------
# Folds
# ---------------------------------------------------------------------------


def _student_grade(work: _StudentWork) -> StudentGrade:
    counted = [s for s in work.all_items() if s.counts_toward_total]
    total = sum(s.item.score or 0 for s in counted)
    possible = sum(s.item.max_score for s in counted)
    pct = percentage(total, possible)
    return StudentGrade(
        student_id=work.student.student_id,
        student_name=work.student.name,
        student_email=work.student.email,
        projects=[s.item for s in work.projects],
        quizzes=[s.item for s in work.quizzes],
        assignments=[s.item for s in work.assignments],
        total_points=total,
        max_points=possible,
        percentage=pct,
        letter_grade=letter_grade(pct),
        gpa=gpa(pct),
        completed=CategoryCounts(
            projects=sum(1 for s in work.projects if s.item.status == "graded"),
            quizzes=len(work.quizzes),
            assignments=sum(1 for s in work.assignments if s.item.status == "graded"),
        ),
        # TODO: classify first-half vs second-half performance once graded
        # items carry a stable ordering; until then every student is "stable".
        trend="stable",
    )


def _category_summary(name: str, works: Sequence[_StudentWork]) -> AssessmentCategory:
    per_student: list[float] = []
    total = completed = 0
    for work in works:
        items = work.category(name)
        total += len(items)
        scored = [s.raw_percent for s in items if s.raw_percent is not None]
        completed += len(scored)
        if not items:
            continue
        per_student.append(sum(scored) / len(scored) if scored else 0.0)
    average = sum(per_student) / len(per_student) if per_student else 0.0
    return AssessmentCategory(
        name=name,
        weight=CATEGORY_WEIGHTS[name],
        average_score=round_2(average),
        total_assessments=total,
        completed_assessments=completed,
    )


def _recent_activity(
    names: dict[str, str],
    projects: Sequence[ProjectSubmission],
    quizzes: Sequence[QuizAttempt],
) -> list[ActivityEntry]:
    # Each source is capped before merging so neither can crowd out the other.
    graded_projects = sorted(
        (
            p
            for p in projects
            if p.status in GRADED_PROJECT_STATUSES and p.grade is not None
        ),
        key=lambda p: p.graded_at or p.submitted_at,
        reverse=True,
    )[:RECENT_PER_SOURCE]
    completed_quizzes = sorted(
        (q for q in quizzes if q.completed_at is not None),
        key=lambda q: q.completed_at,
        reverse=True,
    )[:RECENT_PER_SOURCE]

    entries = [
        ActivityEntry(
            kind="project",
            student_id=p.student_id,
            student_name=names.get(p.student_id, ""),
            title=p.title,
            score=p.grade,
            max_score=p.points_value or 0,
            percentage=percentage(p.grade, p.points_value),
            timestamp=p.graded_at or p.submitted_at,
        )
        for p in graded_projects
    ]
    entries.extend(
        ActivityEntry(
            kind="quiz",
            student_id=q.student_id,
            student_name=names.get(q.student_id, ""),
            title=q.title,
            score=q.score,
            max_score=q.max_score or 0,
            percentage=percentage(q.score, q.max_score),
            timestamp=q.completed_at,
        )
        for q in completed_quizzes
    )
    entries.sort(key=lambda e: e.timestamp, reverse=True)
    return entries[:RECENT_TOTAL]


def grade_course(
    course: Course,
    students: Sequence[EnrolledStudent],
    projects: Sequence[ProjectSubmission],
    quizzes: Sequence[QuizAttempt],
    assignments: Sequence[AssignmentSubmission],
    *,
    now: datetime,
) -> GradeReport:
    """Fold one snapshot of a course's gradebook into a report.  Pure."""
    completed_quizzes = [q for q in quizzes if q.status == "COMPLETED"]

    works = {s.student_id: _StudentWork(student=s) for s in students}
    for sub in projects:
        if sub.student_id in works:
            works[sub.student_id].projects.append(_project_item(sub))
    for attempt in completed_quizzes:
        if attempt.student_id in works:
            works[attempt.student_id].quizzes.append(_quiz_item(attempt))
    for sub in assignments:
        if sub.student_id in works:
            works[sub.student_id].assignments.append(_assignment_item(sub))

    ordered = list(works.values())
    grades = [_student_grade(w) for w in ordered]
    by_id = {g.student_id: g for g in grades}

    distribution: dict[LetterGrade, int] = {letter: 0 for _, letter, _ in GRADE_SCALE}
    for g in grades:
        distribution[g.letter_grade] += 1

    average = (
        round_half_up(sum(g.percentage for g in grades) / len(grades)) if grades else 0
    )

    ranked = sorted(grades, key=lambda g: g.percentage, reverse=True)
    top = [
        StudentPerformance(
            student_id=g.student_id,
            student_name=g.student_name,
            overall_grade=g.percentage,
            letter_grade=g.letter_grade,
        )
        for g in ranked[:TOP_PERFORMERS]
    ]
    struggling = [
        StudentPerformance(
            student_id=g.student_id,
            student_name=g.student_name,
            overall_grade=g.percentage,
            letter_grade=g.letter_grade,
            issues_count=works[g.student_id].pending_count(),
        )
        for g in sorted(
            (g for g in grades if g.percentage < STRUGGLING_BELOW),
            key=lambda g: g.percentage,
        )[:STRUGGLING_LIMIT]
    ]

    names = {sid: g.student_name for sid, g in by_id.items()}
    return GradeReport(
        students=grades,
        class_analytics=ClassAnalytics(
            total_students=len(grades),
            average_grade=average,
            grade_distribution=distribution,
            assessment_categories=[
                _category_summary(name, ordered) for name in CATEGORY_WEIGHTS
            ],
            top_performers=top,
            struggling_students=struggling,
        ),
        recent_activity=_recent_activity(
            names,
            [p for p in projects if p.student_id in works],
            [q for q in completed_quizzes if q.student_id in works],
        ),
        course_info=CourseInfo(
            course_id=course.id,
            course_name=course.title,
            total_enrollments=len(students),
            last_updated=now,
        ),
    )


async def build_grade_report(
    repo: GradebookRepo, course: Course, *, now: datetime
) -> GradeReport:
    """Read the gradebook for ``course`` and fold it into a report.

    The three submission reads are independent and run concurrently.
    """
    students = await repo.list_enrollments(course.id)
    student_ids = [s.student_id for s in students]
    projects, quizzes, assignments = await asyncio.gather(
        repo.list_project_submissions(course.id, student_ids),
        repo.list_quiz_attempts(course.id, student_ids),
        repo.list_assignment_submissions(course.id, student_ids),
    )
    logger.debug(
        "Grading course=%s students=%d projects=%d quizzes=%d assignments=%d",
        course.id,
        len(students),
        len(projects),
        len(quizzes),
        len(assignments),
        extra={"course_id": course.id},
    )
    return grade_course(course, students, projects, quizzes, assignments, now=now)
