"""PostgreSQL implementation of SearchRepo.

``_filtered`` builds the one SELECT (joins + WHERE) per kind; ``fetch``
adds ordering and a page window to it, ``count`` wraps it in a subquery.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement, ScalarSelect, Select, and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import aliased

from app.db.tables import (
    CourseRow,
    DiscussionCommentRow,
    DiscussionRow,
    LessonRow,
    ModuleRow,
    UserRow,
)
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
from app.repos.search_repo import snippet

_Author = aliased(UserRow)

_lesson_count = (
    select(func.count(LessonRow.id))
    .where(LessonRow.module_id == ModuleRow.id)
    .correlate(ModuleRow)
    .scalar_subquery()
)
_comment_count = (
    select(func.count(DiscussionCommentRow.id))
    .where(DiscussionCommentRow.discussion_id == DiscussionRow.id)
    .correlate(DiscussionRow)
    .scalar_subquery()
)


def _text_match(query: str, *columns: Any) -> ColumnElement[bool]:
    return or_(*(col.icontains(query, autoescape=True) for col in columns))


def _visible(criteria: SearchCriteria) -> ColumnElement[bool]:
    conds = [CourseRow.status == "published"]
    if not criteria.can_see_private:
        conds.append(CourseRow.is_private.is_(False))
    return and_(*conds)


def _course_count(criteria: SearchCriteria) -> ScalarSelect[int]:
    return (
        select(func.count(CourseRow.id))
        .where(CourseRow.instructor_id == UserRow.id, _visible(criteria))
        .correlate(UserRow)
        .scalar_subquery()
    )


def _course_facets(f: SearchFilters) -> list[ColumnElement[bool]]:
    conds: list[ColumnElement[bool]] = []
    if f.category is not None:
        conds.append(CourseRow.category == f.category)
    if f.level is not None:
        conds.append(CourseRow.level == f.level)
    if f.language is not None:
        conds.append(CourseRow.language == f.language)
    if f.min_rating is not None:
        conds.append(CourseRow.rating >= f.min_rating)
    if f.max_price is not None:
        conds.append(CourseRow.price <= f.max_price)
    if f.is_free == "yes":
        conds.append(CourseRow.price == 0)
    if f.featured == "yes":
        conds.append(CourseRow.featured.is_(True))
    if f.has_certificate == "yes":
        conds.append(CourseRow.has_certificate.is_(True))
    if f.duration == "short":
        conds.append(CourseRow.duration_minutes <= SHORT_COURSE_MAX_MINUTES)
    elif f.duration == "medium":
        conds.append(
            CourseRow.duration_minutes.between(
                SHORT_COURSE_MAX_MINUTES + 1, MEDIUM_COURSE_MAX_MINUTES
            )
        )
    elif f.duration == "long":
        conds.append(CourseRow.duration_minutes > MEDIUM_COURSE_MAX_MINUTES)
    return conds


def _filtered(kind: EntityKind, c: SearchCriteria) -> Select[Any]:
    q = c.query
    if kind == "course":
        return (
            select(CourseRow, _Author)
            .outerjoin(_Author, _Author.id == CourseRow.instructor_id)
            .where(
                _text_match(q, CourseRow.title, CourseRow.description),
                _visible(c),
                *_course_facets(c.filters),
            )
        )
    if kind == "lesson":
        return (
            select(LessonRow, ModuleRow, CourseRow)
            .join(ModuleRow, ModuleRow.id == LessonRow.module_id)
            .join(CourseRow, CourseRow.id == ModuleRow.course_id)
            .where(_text_match(q, LessonRow.title, LessonRow.description), _visible(c))
        )
    if kind == "module":
        return (
            select(ModuleRow, CourseRow, _lesson_count.label("lesson_count"))
            .join(CourseRow, CourseRow.id == ModuleRow.course_id)
            .where(_text_match(q, ModuleRow.title, ModuleRow.description), _visible(c))
        )
    if kind == "instructor":
        conds = [
            UserRow.role == "instructor",
            or_(
                _text_match(q, UserRow.name, UserRow.bio),
                UserRow.expertise.any(q),
            ),
        ]
        if c.filters.min_rating is not None:
            conds.append(UserRow.rating >= c.filters.min_rating)
        return select(UserRow, _course_count(c).label("course_count")).where(*conds)
    if kind == "discussion":
        return (
            select(DiscussionRow, CourseRow, _Author, _comment_count.label("comment_count"))
            .join(CourseRow, CourseRow.id == DiscussionRow.course_id)
            .outerjoin(_Author, _Author.id == DiscussionRow.author_id)
            .where(_text_match(q, DiscussionRow.title, DiscussionRow.content), _visible(c))
        )
    raise ValueError(f"unknown search kind {kind!r}")


def _primary(kind: EntityKind) -> Any:
    return {
        "course": CourseRow,
        "lesson": LessonRow,
        "module": ModuleRow,
        "instructor": UserRow,
        "discussion": DiscussionRow,
    }[kind]


def _order_by(kind: EntityKind, sort: SortKey, criteria: SearchCriteria) -> list[Any]:
    query = criteria.query
    row = _primary(kind)
    tiebreak = [row.created_at.desc(), row.id.asc()]
    if sort == "newest":
        return [row.created_at.desc(), row.id.asc()]
    if sort == "oldest":
        return [row.created_at.asc(), row.id.asc()]
    if kind == "course":
        if sort == "popular":
            return [CourseRow.enrollment_count.desc(), *tiebreak]
        if sort == "highestRated":
            return [CourseRow.rating.desc().nulls_last(), *tiebreak]
        if sort == "priceAsc":
            return [CourseRow.price.asc(), *tiebreak]
        if sort == "priceDesc":
            return [CourseRow.price.desc(), *tiebreak]
    if kind == "instructor":
        if sort == "popular":
            return [_course_count(criteria).desc(), *tiebreak]
        if sort == "highestRated":
            return [UserRow.rating.desc().nulls_last(), *tiebreak]
    if kind == "discussion" and sort == "popular":
        return [_comment_count.desc(), *tiebreak]

    if kind == "instructor":
        title, body = UserRow.name, UserRow.bio
    elif kind == "discussion":
        title, body = DiscussionRow.title, DiscussionRow.content
    else:
        title, body = row.title, row.description
    relevance = case((title.icontains(query, autoescape=True), 2), else_=0) + case(
        (body.icontains(query, autoescape=True), 1), else_=0
    )
    return [relevance.desc(), *tiebreak]


def _person(user: UserRow | None) -> PersonRef | None:
    if user is None:
        return None
    return PersonRef(id=user.id, name=user.name)


def _to_hit(kind: EntityKind, r: Any) -> SearchHit:
    if kind == "course":
        course, instructor = r
        return CourseHit(
            id=course.id,
            title=course.title,
            snippet=snippet(course.description),
            created_at=course.created_at,
            instructor=_person(instructor),
            category=course.category,
            level=course.level,
            language=course.language,
            price=course.price,
            rating=course.rating,
            enrollment_count=course.enrollment_count,
        )
    if kind == "lesson":
        lesson, module, course = r
        return LessonHit(
            id=lesson.id,
            title=lesson.title,
            snippet=snippet(lesson.description),
            created_at=lesson.created_at,
            module_id=module.id,
            course_id=course.id,
            course_title=course.title,
            duration_minutes=lesson.duration_minutes,
        )
    if kind == "module":
        module, course, lesson_count = r
        return ModuleHit(
            id=module.id,
            title=module.title,
            snippet=snippet(module.description),
            created_at=module.created_at,
            course_id=course.id,
            course_title=course.title,
            lesson_count=lesson_count,
        )
    if kind == "instructor":
        user, course_count = r
        return InstructorHit(
            id=user.id,
            title=user.name,
            snippet=snippet(user.bio),
            created_at=user.created_at,
            expertise=list(user.expertise or []),
            rating=user.rating,
            course_count=course_count,
        )
    if kind == "discussion":
        discussion, course, author, comment_count = r
        return DiscussionHit(
            id=discussion.id,
            title=discussion.title,
            snippet=snippet(discussion.content),
            created_at=discussion.created_at,
            course_id=course.id,
            course_title=course.title,
            author=_person(author),
            comment_count=comment_count,
        )
    raise ValueError(f"unknown search kind {kind!r}")


class PgSearchRepo:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def fetch(
        self,
        kind: EntityKind,
        criteria: SearchCriteria,
        sort: SortKey,
        skip: int,
        take: int,
    ) -> list[SearchHit]:
        stmt = (
            _filtered(kind, criteria)
            .order_by(*_order_by(kind, sort, criteria))
            .offset(skip)
            .limit(take)
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).all()
        return [_to_hit(kind, tuple(r)) for r in rows]

    async def count(self, kind: EntityKind, criteria: SearchCriteria) -> int:
        stmt = select(func.count()).select_from(_filtered(kind, criteria).subquery())
        async with self._sessions() as session:
            return (await session.execute(stmt)).scalar_one()
