"""Per-user privacy settings, scoped by the caller's primary role."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.core.errors import ValidationError
from app.models.principal import Principal
from app.models.privacy import PROFILE_VISIBILITIES, ROLE_DEFAULTS
from app.repos.privacy_repo import PrivacyRepo

logger = logging.getLogger(__name__)


def settings_role(principal: Principal) -> str:
    role = principal.primary_role()
    if role is None:
        raise ValidationError(
            "Privacy settings are not available for this role",
            details={"roles": sorted(principal.roles)},
        )
    return role


def merge_settings(role: str, stored: Mapping[str, Any] | None) -> dict[str, bool | str]:
    """Role defaults overlaid with the stored values the role may hold."""
    merged = dict(ROLE_DEFAULTS[role])
    for key, value in (stored or {}).items():
        if key in merged:
            merged[key] = value
    return merged


def _check(key: str, value: Any, default: bool | str) -> None:
    if key == "profile_visibility":
        if value not in PROFILE_VISIBILITIES:
            raise ValidationError(
                "Invalid profile_visibility",
                details={"allowed": list(PROFILE_VISIBILITIES), "value": value},
            )
        return
    if isinstance(default, bool) and not isinstance(value, bool):
        raise ValidationError(
            f"{key} must be a boolean", details={"field": key, "value": value}
        )


async def get_settings(repo: PrivacyRepo, principal: Principal) -> dict[str, bool | str]:
    role = settings_role(principal)
    return merge_settings(role, await repo.get(principal.user_id))


async def update_settings(
    repo: PrivacyRepo, principal: Principal, submitted: Mapping[str, Any]
) -> dict[str, bool | str]:
    role = settings_role(principal)
    defaults = ROLE_DEFAULTS[role]
    accepted = {}
    for key, value in submitted.items():
        if key not in defaults:
            continue
        _check(key, value, defaults[key])
        accepted[key] = value

    dropped = sorted(set(submitted) - set(accepted))
    if dropped:
        logger.debug("Ignoring privacy keys for role=%s: %s", role, dropped)

    settings = merge_settings(role, accepted)
    await repo.save(principal.user_id, settings)
    return settings
