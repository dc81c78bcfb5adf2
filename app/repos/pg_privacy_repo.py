"""PostgreSQL implementation of PrivacyRepo."""

from __future__ import annotations

import json
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.tables import PrivacySettingsRow


class PgPrivacyRepo:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def get(self, user_id: str) -> dict[str, bool | str] | None:
        stmt = select(PrivacySettingsRow.settings_json).where(
            PrivacySettingsRow.user_id == user_id
        )
        async with self._sessions() as session:
            raw = (await session.execute(stmt)).scalar_one_or_none()
        if raw is None:
            return None
        return json.loads(raw)

    async def save(self, user_id: str, settings: dict[str, bool | str]) -> None:
        now = datetime.now(UTC)
        stmt = insert(PrivacySettingsRow).values(
            user_id=user_id, settings_json=json.dumps(settings), updated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[PrivacySettingsRow.user_id],
            set_={"settings_json": stmt.excluded.settings_json, "updated_at": now},
        )
        async with self._sessions.begin() as session:
            await session.execute(stmt)
