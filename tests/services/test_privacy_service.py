from __future__ import annotations

import asyncio

import pytest

from app.core.errors import ValidationError
from app.models.principal import Principal
from app.models.privacy import ROLE_DEFAULTS
from app.repos.memory_store import dataset
from app.repos.privacy_repo import InMemoryPrivacyRepo
from app.services.privacy_service import (
    get_settings,
    merge_settings,
    settings_role,
    update_settings,
)


def _principal(*roles: str, user_id: str = "u1") -> Principal:
    return Principal(user_id=user_id, roles=frozenset(roles))


def test_primary_role_order() -> None:
    assert settings_role(_principal("mentor", "student")) == "student"
    assert settings_role(_principal("mentor", "instructor")) == "instructor"
    with pytest.raises(ValidationError):
        settings_role(_principal("admin"))


def test_defaults_when_nothing_stored() -> None:
    repo = InMemoryPrivacyRepo(dataset)
    settings = asyncio.run(get_settings(repo, _principal("instructor")))
    assert settings == ROLE_DEFAULTS["instructor"]
    assert settings["allow_other_instructors_to_view_materials"] is False


def test_update_keeps_only_role_keys_and_fills_defaults() -> None:
    repo = InMemoryPrivacyRepo(dataset)
    principal = _principal("student")
    saved = asyncio.run(
        update_settings(
            repo,
            principal,
            {
                "profile_visibility": "private",
                "show_achievements": False,
                "show_ratings": False,  # instructor-only key
            },
        )
    )
    assert saved["profile_visibility"] == "private"
    assert saved["show_achievements"] is False
    assert "show_ratings" not in saved
    assert saved["allow_forum_tagging"] is True
    assert set(saved) == set(ROLE_DEFAULTS["student"])
    assert asyncio.run(get_settings(repo, principal)) == saved


def test_update_rejects_unknown_visibility() -> None:
    repo = InMemoryPrivacyRepo(dataset)
    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(
            update_settings(repo, _principal("mentor"), {"profile_visibility": "friends"})
        )
    assert exc_info.value.details == {
        "allowed": ["all_platform_users", "enrolled_only", "private"],
        "value": "friends",
    }


def test_update_rejects_non_boolean_flags() -> None:
    repo = InMemoryPrivacyRepo(dataset)
    with pytest.raises(ValidationError):
        asyncio.run(
            update_settings(repo, _principal("mentor"), {"show_availability": "yes"})
        )


def test_merge_ignores_keys_from_another_role() -> None:
    merged = merge_settings("mentor", {"show_ratings": False, "show_availability": False})
    assert "show_ratings" not in merged
    assert merged["show_availability"] is False
