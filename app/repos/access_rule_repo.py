from __future__ import annotations

from typing import Protocol

from app.models.access_control import CourseAccessSettings
from app.repos.memory_store import LmsDataset


class AccessRuleRepo(Protocol):
    async def course_exists(self, course_id: str) -> bool: ...
    async def get(self, course_id: str) -> CourseAccessSettings | None: ...
    async def save(self, settings: CourseAccessSettings) -> None:
        """Replace the course's settings wholesale (last write wins)."""
        ...


class InMemoryAccessRuleRepo:
    def __init__(self, data: LmsDataset) -> None:
        self._data = data

    async def course_exists(self, course_id: str) -> bool:
        return course_id in self._data.courses

    async def get(self, course_id: str) -> CourseAccessSettings | None:
        return self._data.access_settings.get(course_id)

    async def save(self, settings: CourseAccessSettings) -> None:
        self._data.access_settings[settings.course_id] = settings
