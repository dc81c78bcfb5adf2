"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.tables import UserRow
from app.models.user import User


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def get_by_id(self, user_id: str) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        async with self._sessions() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return row_to_user(row)


def row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        name=row.name or "",
        email=row.email,
        role=row.role,
        bio=row.bio or "",
        expertise=tuple(row.expertise) if row.expertise else (),
        rating=row.rating,
        created_at=row.created_at,
    )
