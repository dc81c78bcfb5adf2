from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class User:
    id: str
    name: str
    email: str
    role: str = "student"  # admin|instructor|mentor|student
    bio: str = ""
    expertise: tuple[str, ...] = ()  # immutable
    rating: float | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
