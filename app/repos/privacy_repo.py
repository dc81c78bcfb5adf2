from __future__ import annotations

from typing import Protocol

from app.repos.memory_store import LmsDataset


class PrivacyRepo(Protocol):
    async def get(self, user_id: str) -> dict[str, bool | str] | None: ...
    async def save(self, user_id: str, settings: dict[str, bool | str]) -> None: ...


class InMemoryPrivacyRepo:
    def __init__(self, data: LmsDataset) -> None:
        self._data = data

    async def get(self, user_id: str) -> dict[str, bool | str] | None:
        stored = self._data.privacy_settings.get(user_id)
        return dict(stored) if stored is not None else None

    async def save(self, user_id: str, settings: dict[str, bool | str]) -> None:
        self._data.privacy_settings[user_id] = dict(settings)
