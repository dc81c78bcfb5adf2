"""PostgreSQL implementation of AccessRuleRepo."""

from __future__ import annotations

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.tables import AccessRuleRow, CourseRow
from app.models.access_control import AccessRule, CourseAccessSettings

_rules_adapter = TypeAdapter(list[AccessRule])


class PgAccessRuleRepo:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def course_exists(self, course_id: str) -> bool:
        stmt = select(CourseRow.id).where(CourseRow.id == course_id)
        async with self._sessions() as session:
            return (await session.execute(stmt)).scalar_one_or_none() is not None

    async def get(self, course_id: str) -> CourseAccessSettings | None:
        stmt = select(AccessRuleRow).where(AccessRuleRow.course_id == course_id)
        async with self._sessions() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return CourseAccessSettings(
            course_id=row.course_id,
            is_public=row.is_public,
            requires_enrollment=row.requires_enrollment,
            allowed_roles=list(row.allowed_roles),
            rules=_rules_adapter.validate_json(row.rules_json),
            updated_at=row.updated_at,
        )

    async def save(self, settings: CourseAccessSettings) -> None:
        values = {
            "course_id": settings.course_id,
            "is_public": settings.is_public,
            "requires_enrollment": settings.requires_enrollment,
            "allowed_roles": list(settings.allowed_roles),
            "rules_json": _rules_adapter.dump_json(settings.rules).decode(),
            "updated_at": settings.updated_at,
        }
        stmt = insert(AccessRuleRow).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AccessRuleRow.course_id],
            set_={k: v for k, v in values.items() if k != "course_id"},
        )
        async with self._sessions.begin() as session:
            await session.execute(stmt)
