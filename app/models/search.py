"""Search request parameters and the tagged union of search hits."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Literal, TypeAlias, Union

from pydantic import BaseModel, ConfigDict, Field

SearchType = Literal["all", "courses", "lessons", "modules", "instructors", "discussions"]
SortKey = Literal[
    "relevance",
    "newest",
    "oldest",
    "popular",
    "highestRated",
    "priceAsc",
    "priceDesc",
]
YesNo = Literal["yes", "no"]
EntityKind = Literal["course", "lesson", "module", "instructor", "discussion"]

# Fixed order: also the concatenation order of the `all` view.
ENTITY_KINDS: tuple[EntityKind, ...] = (
    "course",
    "lesson",
    "module",
    "instructor",
    "discussion",
)

TYPE_TO_KIND: dict[str, EntityKind] = {
    "courses": "course",
    "lessons": "lesson",
    "modules": "module",
    "instructors": "instructor",
    "discussions": "discussion",
}

# Course duration buckets, in minutes (upper bound inclusive).
SHORT_COURSE_MAX_MINUTES = 120
MEDIUM_COURSE_MAX_MINUTES = 600


class SearchFilters(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    category: str | None = None
    level: Literal["beginner", "intermediate", "advanced"] | None = None
    language: str | None = None
    min_rating: float | None = Field(default=None, ge=0, le=5)
    max_price: float | None = Field(default=None, ge=0)
    is_free: YesNo | None = None
    featured: YesNo | None = None
    has_certificate: YesNo | None = None
    duration: Literal["short", "medium", "long"] | None = None


class SearchParams(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    q: str = Field(min_length=1, max_length=100)
    type: SearchType = "all"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=50)
    sort: SortKey = "relevance"
    include_private: YesNo = "no"
    filters: SearchFilters = Field(default_factory=SearchFilters)


@dataclass(frozen=True, slots=True)
class SearchCriteria:
    """Predicate inputs shared by a kind's fetch and its count."""

    query: str
    filters: SearchFilters
    can_see_private: bool = False


# ---------------------------------------------------------------------------
# Hits
# ---------------------------------------------------------------------------


class PersonRef(BaseModel):
    id: str
    name: str


class _HitBase(BaseModel):
    id: str
    title: str
    snippet: str = ""
    created_at: datetime


class CourseHit(_HitBase):
    result_type: Literal["course"] = "course"
    instructor: PersonRef | None = None
    category: str | None = None
    level: str | None = None
    language: str | None = None
    price: float = 0.0
    rating: float | None = None
    enrollment_count: int = 0


class LessonHit(_HitBase):
    result_type: Literal["lesson"] = "lesson"
    module_id: str
    course_id: str
    course_title: str
    duration_minutes: int | None = None


class ModuleHit(_HitBase):
    result_type: Literal["module"] = "module"
    course_id: str
    course_title: str
    lesson_count: int = 0


class InstructorHit(_HitBase):
    result_type: Literal["instructor"] = "instructor"
    expertise: list[str] = Field(default_factory=list)
    rating: float | None = None
    course_count: int = 0


class DiscussionHit(_HitBase):
    result_type: Literal["discussion"] = "discussion"
    course_id: str
    course_title: str
    author: PersonRef | None = None
    comment_count: int = 0


SearchHit: TypeAlias = Annotated[
    Union[CourseHit, LessonHit, ModuleHit, InstructorHit, DiscussionHit],
    Field(discriminator="result_type"),
]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool


class SearchPage(BaseModel):
    data: list[SearchHit]
    pagination: Pagination
    query: str
    type: SearchType
    filters: SearchFilters
