from __future__ import annotations

import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.course import Course, Lesson, Module
from app.models.enrollment import Enrollment
from app.models.user import User
from app.repos.memory_store import dataset
from app.services import token_service
from app.services.cache import cache_service

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_dataset() -> None:
    """Clear the shared in-memory dataset between tests."""
    dataset.clear()


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_dependency_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token with default role (student)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["admin"])


# ---------------------------------------------------------------------------
# Dataset helpers
# ---------------------------------------------------------------------------


def add_user(user_id: str, role: str = "student", **extra) -> User:
    extra.setdefault("name", user_id.replace("-", " ").title())
    extra.setdefault("email", f"{user_id}@example.com")
    return dataset.add_user(User(id=user_id, role=role, **extra))


def add_course(course_id: str, instructor_id: str, **extra) -> Course:
    extra.setdefault("title", course_id.replace("-", " ").title())
    extra.setdefault("status", "published")
    return dataset.add_course(Course(id=course_id, instructor_id=instructor_id, **extra))


def add_lessons(course_id: str, count: int, **extra) -> list[Lesson]:
    """One module holding ``count`` lessons."""
    module = dataset.add_module(
        Module(id=f"{course_id}-m1", course_id=course_id, title="Module 1")
    )
    return [
        dataset.add_lesson(
            Lesson(id=f"{course_id}-l{i}", module_id=module.id, title=f"Lesson {i}", **extra)
        )
        for i in range(1, count + 1)
    ]


def enroll(
    student_id: str,
    course_id: str,
    enrolled_at: datetime | None = None,
    **extra,
) -> Enrollment:
    return dataset.add_enrollment(
        Enrollment(
            student_id=student_id,
            course_id=course_id,
            enrolled_at=enrolled_at or datetime.now(UTC),
            **extra,
        )
    )
