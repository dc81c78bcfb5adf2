from __future__ import annotations

from typing import Protocol

from app.models.user import User
from app.repos.memory_store import LmsDataset


class UserRepo(Protocol):
    async def get_by_id(self, user_id: str) -> User | None: ...


class InMemoryUserRepo:
    def __init__(self, data: LmsDataset) -> None:
        self._data = data

    async def get_by_id(self, user_id: str) -> User | None:
        return self._data.users.get(user_id)
