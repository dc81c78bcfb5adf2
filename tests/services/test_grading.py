"""Grade report folds: rounding, summed overall grade, class analytics."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from app.models.assessment import AssignmentSubmission, ProjectSubmission, QuizAttempt
from app.models.course import Assignment, Course, Module, Project, Quiz
from app.models.enrollment import EnrolledStudent, Enrollment
from app.models.user import User
from app.repos.gradebook_repo import InMemoryGradebookRepo
from app.repos.memory_store import dataset
from app.services.grading import (
    build_grade_report,
    gpa,
    grade_course,
    letter_grade,
    percentage,
    round_2,
    round_half_up,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
COURSE = Course(id="algebra", title="Algebra", instructor_id="teach-1")


def _student(sid: str, offset: int = 0) -> EnrolledStudent:
    return EnrolledStudent(
        student_id=sid,
        name=sid.title(),
        email=f"{sid}@example.com",
        enrolled_at=NOW - timedelta(days=30 - offset),
    )


def _project(sid: str, grade, points=100, status="GRADED", pid="p1", at=None):
    return ProjectSubmission(
        id=f"{sid}-{pid}",
        student_id=sid,
        project_id=pid,
        title=f"Project {pid}",
        grade=grade,
        points_value=points,
        status=status,
        submitted_at=at or NOW - timedelta(days=2),
        graded_at=at or NOW - timedelta(days=1),
    )


def _quiz(sid: str, score, max_score=10, status="COMPLETED", qid="q1", at=None):
    return QuizAttempt(
        id=f"{sid}-{qid}",
        student_id=sid,
        quiz_id=qid,
        title=f"Quiz {qid}",
        score=score,
        max_score=max_score,
        status=status,
        completed_at=at or NOW - timedelta(days=1),
    )


def _assignment(sid: str, grade, points=20, aid="a1"):
    return AssignmentSubmission(
        id=f"{sid}-{aid}",
        student_id=sid,
        assignment_id=aid,
        title=f"Assignment {aid}",
        grade=grade,
        points=points,
        status="GRADED" if grade is not None else "SUBMITTED",
        submitted_at=NOW - timedelta(days=3),
    )


# ---- rounding and the grade scale ----


def test_zero_max_score_is_zero_percent() -> None:
    assert percentage(5, 0) == 0
    assert percentage(None, 10) == 0
    assert percentage(0, 0) == 0


def test_45_of_50_is_an_a() -> None:
    pct = percentage(45, 50)
    assert pct == 90
    assert letter_grade(pct) == "A"
    assert gpa(pct) == 4.0


@pytest.mark.parametrize(
    ("pct", "letter", "points"),
    [(89, "B", 3.0), (80, "B", 3.0), (79, "C", 2.0), (60, "D", 1.0), (59, "F", 0.0)],
)
def test_grade_scale_boundaries(pct: int, letter: str, points: float) -> None:
    assert letter_grade(pct) == letter
    assert gpa(pct) == points


def test_round_half_up_rounds_halves_up() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(81.8) == 82
    assert round_2(66.666) == 66.67


# ---- per-student ----


def test_overall_grade_is_summed_not_averaged() -> None:
    report = grade_course(
        COURSE,
        [_student("ann")],
        [_project("ann", 80, points=100)],
        [_quiz("ann", 10, max_score=10)],
        [],
        now=NOW,
    )
    ann = report.students[0]
    assert ann.total_points == 90
    assert ann.max_points == 110
    # 100 * 90 / 110 = 81.8, not the 90 an average of 80% and 100% would give.
    assert ann.percentage == 82
    assert ann.letter_grade == "B"


def test_pending_items_stay_out_of_the_totals() -> None:
    report = grade_course(
        COURSE,
        [_student("ann")],
        [_project("ann", 50, status="SUBMITTED")],
        [],
        [_assignment("ann", 18), _assignment("ann", None, aid="a2")],
        now=NOW,
    )
    ann = report.students[0]
    assert ann.max_points == 20
    assert ann.percentage == 90
    assert [p.status for p in ann.projects] == ["pending"]
    assert [a.status for a in ann.assignments] == ["graded", "pending"]
    assert ann.completed.projects == 0
    assert ann.completed.assignments == 1


def test_only_completed_quiz_attempts_count() -> None:
    report = grade_course(
        COURSE,
        [_student("ann")],
        [],
        [_quiz("ann", 10), _quiz("ann", 2, status="IN_PROGRESS", qid="q2")],
        [],
        now=NOW,
    )
    ann = report.students[0]
    assert [q.id for q in ann.quizzes] == ["q1"]
    assert ann.percentage == 100


def test_trend_is_always_stable() -> None:
    report = grade_course(COURSE, [_student("ann")], [_project("ann", 10)], [], [], now=NOW)
    assert report.students[0].trend == "stable"


# ---- class level ----


def test_empty_class_has_all_zero_aggregates() -> None:
    report = grade_course(COURSE, [], [], [], [], now=NOW)
    analytics = report.class_analytics
    assert analytics.total_students == 0
    assert analytics.average_grade == 0
    assert analytics.grade_distribution == {"A": 0, "B": 0, "C": 0, "D": 0, "F": 0}
    assert analytics.top_performers == []
    assert analytics.struggling_students == []
    assert report.recent_activity == []
    assert [c.name for c in analytics.assessment_categories] == [
        "Projects",
        "Quizzes",
        "Assignments",
    ]
    assert all(c.average_score == 0 for c in analytics.assessment_categories)


def test_category_average_is_an_average_of_student_averages() -> None:
    # ann: projects 100% and 50% -> 75; bob: one project at 25% -> 25.
    # Average of averages is 50; a pooled mean would be 58.33.
    report = grade_course(
        COURSE,
        [_student("ann"), _student("bob", 1)],
        [
            _project("ann", 100, pid="p1"),
            _project("ann", 50, pid="p2"),
            _project("bob", 25, pid="p1"),
        ],
        [],
        [],
        now=NOW,
    )
    projects = report.class_analytics.assessment_categories[0]
    assert projects.average_score == 50.0
    assert projects.weight == 50
    assert projects.total_assessments == 3
    assert projects.completed_assessments == 3


def test_struggling_students_are_ascending_with_issue_counts() -> None:
    students = [_student(s, i) for i, s in enumerate(["ann", "bob", "cat"])]
    report = grade_course(
        COURSE,
        students,
        [
            _project("ann", 95),
            _project("bob", 40),
            _project("cat", 65),
            _project("cat", None, status="SUBMITTED", pid="p2"),
        ],
        [],
        [_assignment("bob", None)],
        now=NOW,
    )
    analytics = report.class_analytics
    assert [s.student_id for s in analytics.top_performers] == ["ann", "cat", "bob"]
    struggling = analytics.struggling_students
    assert [s.student_id for s in struggling] == ["bob", "cat"]
    assert [s.issues_count for s in struggling] == [1, 1]
    assert analytics.grade_distribution == {"A": 1, "B": 0, "C": 0, "D": 1, "F": 1}
    assert analytics.average_grade == round_half_up((95 + 40 + 65) / 3)


def test_recent_activity_caps_each_source_before_merging() -> None:
    students = [_student("ann")]
    projects = [
        _project("ann", 90, pid=f"p{i}", at=NOW - timedelta(hours=i)) for i in range(8)
    ]
    quizzes = [
        _quiz("ann", 9, qid=f"q{i}", at=NOW - timedelta(days=10 + i)) for i in range(8)
    ]
    report = grade_course(COURSE, students, projects, quizzes, [], now=NOW)

    kinds = [e.kind for e in report.recent_activity]
    # The eight projects are all newer, yet quizzes still fill half the feed.
    assert kinds == ["project"] * 5 + ["quiz"] * 5
    stamps = [e.timestamp for e in report.recent_activity]
    assert stamps == sorted(stamps, reverse=True)


# ---- repo-backed build ----


def test_build_grade_report_reads_through_the_repo() -> None:
    dataset.add_user(User(id="ann", name="Ann", email="ann@example.com"))
    dataset.add_user(User(id="bob", name="Bob", email="bob@example.com"))
    dataset.add_course(COURSE)
    dataset.add_module(Module(id="m1", course_id=COURSE.id, title="Intro"))
    dataset.add_project(Project(id="p1", course_id=COURSE.id, title="P", points_value=100))
    dataset.add_quiz(Quiz(id="q1", module_id="m1", title="Q", max_score=10))
    dataset.add_assignment(Assignment(id="a1", module_id="m1", title="A", points=20))
    dataset.add_enrollment(Enrollment("ann", COURSE.id, NOW - timedelta(days=5)))
    dataset.add_enrollment(
        Enrollment("bob", COURSE.id, NOW - timedelta(days=4), status="dropped")
    )
    dataset.add_submission(_project("ann", 80))
    dataset.add_submission(_quiz("ann", 10))
    dataset.add_submission(_assignment("bob", 20))

    report = asyncio.run(
        build_grade_report(InMemoryGradebookRepo(dataset), COURSE, now=NOW)
    )

    assert [s.student_id for s in report.students] == ["ann"]
    assert report.students[0].percentage == 82
    assert report.course_info.total_enrollments == 1
    assert report.course_info.last_updated == NOW
