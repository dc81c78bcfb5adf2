"""Shared in-memory snapshot backing every InMemory*Repo.

The reporting repos read across the same relational graph (courses own
modules own lessons, and so on), so they share one dataset instead of each
keeping a private dict.  Tests seed it through the ``add_*`` helpers and the
autouse fixture in conftest.py clears it between tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.models.access_control import CourseAccessSettings
from app.models.assessment import AssignmentSubmission, ProjectSubmission, QuizAttempt
from app.models.course import (
    Assignment,
    Course,
    Discussion,
    Lesson,
    Module,
    Project,
    Quiz,
)
from app.models.enrollment import Enrollment, LessonView
from app.models.user import User


@dataclass
class LmsDataset:
    users: dict[str, User] = field(default_factory=dict)
    courses: dict[str, Course] = field(default_factory=dict)
    modules: dict[str, Module] = field(default_factory=dict)
    lessons: dict[str, Lesson] = field(default_factory=dict)
    assignments: dict[str, Assignment] = field(default_factory=dict)
    quizzes: dict[str, Quiz] = field(default_factory=dict)
    projects: dict[str, Project] = field(default_factory=dict)
    discussions: dict[str, Discussion] = field(default_factory=dict)
    enrollments: list[Enrollment] = field(default_factory=list)
    lesson_views: list[LessonView] = field(default_factory=list)
    project_submissions: list[ProjectSubmission] = field(default_factory=list)
    quiz_attempts: list[QuizAttempt] = field(default_factory=list)
    assignment_submissions: list[AssignmentSubmission] = field(default_factory=list)
    access_settings: dict[str, CourseAccessSettings] = field(default_factory=dict)
    privacy_settings: dict[str, dict[str, bool | str]] = field(default_factory=dict)

    def clear(self) -> None:
        for value in vars(self).values():
            value.clear()

    # --- seeding helpers ---

    def add_user(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def add_course(self, course: Course) -> Course:
        self.courses[course.id] = course
        return course

    def add_module(self, module: Module) -> Module:
        self.modules[module.id] = module
        return module

    def add_lesson(self, lesson: Lesson) -> Lesson:
        self.lessons[lesson.id] = lesson
        return lesson

    def add_assignment(self, assignment: Assignment) -> Assignment:
        self.assignments[assignment.id] = assignment
        return assignment

    def add_quiz(self, quiz: Quiz) -> Quiz:
        self.quizzes[quiz.id] = quiz
        return quiz

    def add_project(self, project: Project) -> Project:
        self.projects[project.id] = project
        return project

    def add_discussion(self, discussion: Discussion) -> Discussion:
        self.discussions[discussion.id] = discussion
        return discussion

    def add_enrollment(self, enrollment: Enrollment) -> Enrollment:
        self.enrollments.append(enrollment)
        return enrollment

    def add_lesson_view(self, view: LessonView) -> LessonView:
        self.lesson_views.append(view)
        return view

    def add_submission(
        self, record: ProjectSubmission | QuizAttempt | AssignmentSubmission
    ) -> None:
        if isinstance(record, ProjectSubmission):
            self.project_submissions.append(record)
        elif isinstance(record, QuizAttempt):
            self.quiz_attempts.append(record)
        elif isinstance(record, AssignmentSubmission):
            self.assignment_submissions.append(record)
        else:
            raise TypeError(f"unknown assessment record {record!r}")

    # --- graph lookups shared by the repos ---

    def module_ids_of(self, course_id: str) -> set[str]:
        return {m.id for m in self.modules.values() if m.course_id == course_id}

    def lesson_ids_of(self, course_id: str) -> list[str]:
        module_ids = self.module_ids_of(course_id)
        return [lsn.id for lsn in self.lessons.values() if lsn.module_id in module_ids]

    def assignment_ids_of(self, course_id: str) -> list[str]:
        module_ids = self.module_ids_of(course_id)
        return [a.id for a in self.assignments.values() if a.module_id in module_ids]

    def quiz_ids_of(self, course_id: str) -> set[str]:
        module_ids = self.module_ids_of(course_id)
        return {q.id for q in self.quizzes.values() if q.module_id in module_ids}

    def course_of_module(self, module_id: str) -> Course | None:
        module = self.modules.get(module_id)
        if module is None:
            return None
        return self.courses.get(module.course_id)


# Module-level singleton shared by the in-memory repos.
dataset = LmsDataset()
