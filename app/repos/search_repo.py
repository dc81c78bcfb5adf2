"""Per-kind search reads.

Every kind has exactly one predicate, used by both ``fetch`` and ``count``,
so the totals reported for a query always describe the same rows the pages
are cut from.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Protocol

from app.models.course import Course, Discussion, Lesson, Module
from app.models.search import (
    MEDIUM_COURSE_MAX_MINUTES,
    SHORT_COURSE_MAX_MINUTES,
    CourseHit,
    DiscussionHit,
    EntityKind,
    InstructorHit,
    LessonHit,
    ModuleHit,
    PersonRef,
    SearchCriteria,
    SearchFilters,
    SearchHit,
    SortKey,
)
from app.models.user import User
from app.repos.memory_store import LmsDataset

SNIPPET_LENGTH = 160


class SearchRepo(Protocol):
    async def fetch(
        self,
        kind: EntityKind,
        criteria: SearchCriteria,
        sort: SortKey,
        skip: int,
        take: int,
    ) -> list[SearchHit]: ...

    async def count(self, kind: EntityKind, criteria: SearchCriteria) -> int: ...


def snippet(text: str | None) -> str:
    text = (text or "").strip()
    if len(text) <= SNIPPET_LENGTH:
        return text
    return text[: SNIPPET_LENGTH - 1].rstrip() + "…"


def duration_bucket(minutes: int | None) -> str | None:
    if minutes is None:
        return None
    if minutes <= SHORT_COURSE_MAX_MINUTES:
        return "short"
    if minutes <= MEDIUM_COURSE_MAX_MINUTES:
        return "medium"
    return "long"


def _contains(haystack: str | None, needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def _course_facets_match(course: Course, f: SearchFilters) -> bool:
    if f.category is not None and course.category != f.category:
        return False
    if f.level is not None and course.level != f.level:
        return False
    if f.language is not None and course.language != f.language:
        return False
    if f.min_rating is not None and (
        course.rating is None or course.rating < f.min_rating
    ):
        return False
    if f.max_price is not None and course.price > f.max_price:
        return False
    if f.is_free == "yes" and course.price != 0:
        return False
    if f.featured == "yes" and not course.featured:
        return False
    if f.has_certificate == "yes" and not course.has_certificate:
        return False
    if f.duration is not None and duration_bucket(course.duration_minutes) != f.duration:
        return False
    return True


class InMemorySearchRepo:
    def __init__(self, data: LmsDataset) -> None:
        self._data = data

    # --- predicates (one per kind) ---

    def _course_visible(self, course: Course | None, criteria: SearchCriteria) -> bool:
        if course is None or not course.is_published:
            return False
        return criteria.can_see_private or not course.is_private

    def _courses(self, c: SearchCriteria) -> Iterable[Course]:
        for course in self._data.courses.values():
            if not (_contains(course.title, c.query) or _contains(course.description, c.query)):
                continue
            if self._course_visible(course, c) and _course_facets_match(course, c.filters):
                yield course

    def _lessons(self, c: SearchCriteria) -> Iterable[Lesson]:
        for lesson in self._data.lessons.values():
            if not (_contains(lesson.title, c.query) or _contains(lesson.description, c.query)):
                continue
            if self._course_visible(self._data.course_of_module(lesson.module_id), c):
                yield lesson

    def _modules(self, c: SearchCriteria) -> Iterable[Module]:
        for module in self._data.modules.values():
            if not (_contains(module.title, c.query) or _contains(module.description, c.query)):
                continue
            if self._course_visible(self._data.courses.get(module.course_id), c):
                yield module

    def _instructors(self, c: SearchCriteria) -> Iterable[User]:
        min_rating = c.filters.min_rating
        for user in self._data.users.values():
            if user.role != "instructor":
                continue
            if not (
                _contains(user.name, c.query)
                or _contains(user.bio, c.query)
                or c.query in user.expertise
            ):
                continue
            if min_rating is not None and (user.rating is None or user.rating < min_rating):
                continue
            yield user

    def _discussions(self, c: SearchCriteria) -> Iterable[Discussion]:
        for d in self._data.discussions.values():
            if not (_contains(d.title, c.query) or _contains(d.content, c.query)):
                continue
            if self._course_visible(self._data.courses.get(d.course_id), c):
                yield d

    def _matching(self, kind: EntityKind, criteria: SearchCriteria) -> list[Any]:
        if kind == "course":
            return list(self._courses(criteria))
        if kind == "lesson":
            return list(self._lessons(criteria))
        if kind == "module":
            return list(self._modules(criteria))
        if kind == "instructor":
            return list(self._instructors(criteria))
        if kind == "discussion":
            return list(self._discussions(criteria))
        raise ValueError(f"unknown search kind {kind!r}")

    # --- ordering ---

    def _course_count(self, instructor_id: str, criteria: SearchCriteria) -> int:
        return sum(
            1
            for c in self._data.courses.values()
            if c.instructor_id == instructor_id and self._course_visible(c, criteria)
        )

    def _sort(
        self, kind: EntityKind, rows: list[Any], sort: SortKey, criteria: SearchCriteria
    ) -> None:
        # Sorts are applied least-significant first so Python's stable sort
        # leaves the final key dominant.
        rows.sort(key=lambda r: r.id)
        rows.sort(key=lambda r: r.created_at, reverse=True)
        key = _sort_key(kind, sort, self, criteria)
        if key is not None:
            fn, reverse = key
            rows.sort(key=fn, reverse=reverse)
            return
        rows.sort(key=lambda r: _relevance(kind, r, criteria.query), reverse=True)

    # --- hit construction ---

    def _person(self, user_id: str) -> PersonRef | None:
        user = self._data.users.get(user_id)
        if user is None:
            return None
        return PersonRef(id=user.id, name=user.name)

    def _to_hit(self, kind: EntityKind, row: Any, criteria: SearchCriteria) -> SearchHit:
        if kind == "course":
            return CourseHit(
                id=row.id,
                title=row.title,
                snippet=snippet(row.description),
                created_at=row.created_at,
                instructor=self._person(row.instructor_id),
                category=row.category,
                level=row.level,
                language=row.language,
                price=row.price,
                rating=row.rating,
                enrollment_count=row.enrollment_count,
            )
        if kind == "lesson":
            module = self._data.modules[row.module_id]
            course = self._data.courses[module.course_id]
            return LessonHit(
                id=row.id,
                title=row.title,
                snippet=snippet(row.description),
                created_at=row.created_at,
                module_id=module.id,
                course_id=course.id,
                course_title=course.title,
                duration_minutes=row.duration_minutes,
            )
        if kind == "module":
            course = self._data.courses[row.course_id]
            return ModuleHit(
                id=row.id,
                title=row.title,
                snippet=snippet(row.description),
                created_at=row.created_at,
                course_id=course.id,
                course_title=course.title,
                lesson_count=sum(
                    1 for lsn in self._data.lessons.values() if lsn.module_id == row.id
                ),
            )
        if kind == "instructor":
            return InstructorHit(
                id=row.id,
                title=row.name,
                snippet=snippet(row.bio),
                created_at=row.created_at,
                expertise=list(row.expertise),
                rating=row.rating,
                course_count=self._course_count(row.id, criteria),
            )
        if kind == "discussion":
            course = self._data.courses[row.course_id]
            return DiscussionHit(
                id=row.id,
                title=row.title,
                snippet=snippet(row.content),
                created_at=row.created_at,
                course_id=course.id,
                course_title=course.title,
                author=self._person(row.author_id),
                comment_count=row.comment_count,
            )
        raise ValueError(f"unknown search kind {kind!r}")

    # --- SearchRepo ---

    async def fetch(
        self,
        kind: EntityKind,
        criteria: SearchCriteria,
        sort: SortKey,
        skip: int,
        take: int,
    ) -> list[SearchHit]:
        rows = self._matching(kind, criteria)
        self._sort(kind, rows, sort, criteria)
        return [self._to_hit(kind, r, criteria) for r in rows[skip : skip + take]]

    async def count(self, kind: EntityKind, criteria: SearchCriteria) -> int:
        return len(self._matching(kind, criteria))


def _relevance(kind: EntityKind, row: Any, query: str) -> int:
    """Title hits outrank body hits."""
    if kind == "instructor":
        title, body = row.name, row.bio
    elif kind == "discussion":
        title, body = row.title, row.content
    else:
        title, body = row.title, row.description
    return 2 * _contains(title, query) + _contains(body, query)


def _nullable_desc(value: float | None) -> tuple[bool, float]:
    # For reverse=True sorts: present values first, then None.
    return (value is not None, value or 0.0)


def _sort_key(
    kind: EntityKind,
    sort: SortKey,
    repo: InMemorySearchRepo,
    criteria: SearchCriteria,
) -> tuple[Callable[[Any], Any], bool] | None:
    """(key, reverse) for a kind's sort, or None to fall back to relevance."""
    if sort == "newest":
        return (lambda r: r.created_at), True
    if sort == "oldest":
        return (lambda r: r.created_at), False
    if kind == "course":
        if sort == "popular":
            return (lambda r: r.enrollment_count), True
        if sort == "highestRated":
            return (lambda r: _nullable_desc(r.rating)), True
        if sort == "priceAsc":
            return (lambda r: r.price), False
        if sort == "priceDesc":
            return (lambda r: r.price), True
    if kind == "instructor":
        if sort == "popular":
            return (lambda r: repo._course_count(r.id, criteria)), True
        if sort == "highestRated":
            return (lambda r: _nullable_desc(r.rating)), True
    if kind == "discussion" and sort == "popular":
        return (lambda r: r.comment_count), True
    return None
