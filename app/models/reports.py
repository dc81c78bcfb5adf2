"""Report shapes returned by the aggregators.

These are derived, never persisted.  They are pydantic models so the API
layer can use them as ``response_model`` and the cache can round-trip
them with ``model_dump_json`` / ``model_validate_json``.
"""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field

LetterGrade = Literal["A", "B", "C", "D", "F"]

# ---------------------------------------------------------------------------
# Grades
# ---------------------------------------------------------------------------


class GradedItem(BaseModel):
    id: str
    title: str
    score: float | None
    max_score: float
    percentage: int
    letter_grade: LetterGrade
    # Only projects and assignments carry a review status.
    status: Literal["graded", "pending"] | None = None
    submitted_at: dt.datetime | None = None
    graded_at: dt.datetime | None = None


class CategoryCounts(BaseModel):
    projects: int = 0
    quizzes: int = 0
    assignments: int = 0


class StudentGrade(BaseModel):
    student_id: str
    student_name: str
    student_email: str
    projects: list[GradedItem] = Field(default_factory=list)
    quizzes: list[GradedItem] = Field(default_factory=list)
    assignments: list[GradedItem] = Field(default_factory=list)
    total_points: float = 0
    max_points: float = 0
    percentage: int = 0
    letter_grade: LetterGrade = "F"
    gpa: float = 0.0
    completed: CategoryCounts = Field(default_factory=CategoryCounts)
    trend: Literal["stable"] = "stable"


class AssessmentCategory(BaseModel):
    name: str
    weight: int
    average_score: float
    total_assessments: int
    completed_assessments: int


class StudentPerformance(BaseModel):
    student_id: str
    student_name: str
    overall_grade: int
    letter_grade: LetterGrade
    issues_count: int | None = None


class ActivityEntry(BaseModel):
    kind: Literal["project", "quiz"]
    student_id: str
    student_name: str
    title: str
    score: float | None
    max_score: float
    percentage: int
    timestamp: dt.datetime


class ClassAnalytics(BaseModel):
    total_students: int
    average_grade: int
    grade_distribution: dict[LetterGrade, int]
    assessment_categories: list[AssessmentCategory]
    top_performers: list[StudentPerformance]
    struggling_students: list[StudentPerformance]


class CourseInfo(BaseModel):
    course_id: str
    course_name: str
    total_enrollments: int
    last_updated: dt.datetime


class GradeReport(BaseModel):
    students: list[StudentGrade]
    class_analytics: ClassAnalytics
    recent_activity: list[ActivityEntry]
    course_info: CourseInfo


# ---------------------------------------------------------------------------
# Engagement
# ---------------------------------------------------------------------------


class TimeSeriesPoint(BaseModel):
    date: dt.date
    students: int
    completion: int
    engagement: int
    assignments: int


class HeatmapCell(BaseModel):
    day: Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    hour: int = Field(ge=0, le=23)
    value: int = Field(ge=0)


class CourseEngagement(BaseModel):
    course_id: str
    title: str
    students: int
    total_lessons: int
    completion_rate: int
    average_assignment_score: float


class EngagementMetrics(BaseModel):
    total_students: int
    total_courses: int
    course_completion: int
    average_engagement: int
    assignments_submitted: int
    average_assignment_score: float


class EngagementReport(BaseModel):
    time_series: list[TimeSeriesPoint]
    heatmap: list[HeatmapCell]
    course_stats: list[CourseEngagement]
    metrics: EngagementMetrics
    generated_at: dt.datetime


# ---------------------------------------------------------------------------
# Admin analytics
# ---------------------------------------------------------------------------


class DashboardFilters(BaseModel):
    start_date: dt.date
    end_date: dt.date
    category_ids: list[str] = Field(default_factory=list)
    instructor_ids: list[str] = Field(default_factory=list)


class DashboardReport(BaseModel):
    filters: DashboardFilters
    total_courses: int
    published_courses: int
    total_enrollments: int
    new_enrollments: int
    completed_enrollments: int
    completion_rate: int


class Change(BaseModel):
    current: int
    previous: int
    percent_change: float | None


class EnrollmentSection(BaseModel):
    total: int
    new: int
    completed: int


class CourseSection(BaseModel):
    total: int
    new: int
    published: int


class TopCourse(BaseModel):
    course_id: str
    title: str
    enrollments: int


class Comparison(BaseModel):
    new_enrollments: Change
    new_courses: Change


class TimeframeReport(BaseModel):
    timeframe: Literal["day", "week", "month", "year", "all"]
    start: dt.datetime
    end: dt.datetime
    enrollments: EnrollmentSection | None = None
    courses: CourseSection | None = None
    top_courses: list[TopCourse] | None = None
    comparison: Comparison | None = None
