"""Privacy settings for the calling user."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.dependencies import require_user
from app.api.providers import get_privacy_repo
from app.api.reporting import guarded
from app.models.principal import Principal
from app.repos.privacy_repo import PrivacyRepo
from app.services import privacy_service

router = APIRouter(prefix="/v1/privacy", tags=["privacy"])


class PrivacySettingsIn(BaseModel):
    privacy_settings: dict[str, Any]


class PrivacySettingsOut(BaseModel):
    privacy_settings: dict[str, bool | str]


@router.get("", response_model=PrivacySettingsOut)
async def read_privacy(
    principal: Annotated[Principal, Depends(require_user)],
    repo: Annotated[PrivacyRepo, Depends(get_privacy_repo)],
) -> PrivacySettingsOut:
    settings = await guarded(
        "fetch privacy settings", lambda: privacy_service.get_settings(repo, principal)
    )
    return PrivacySettingsOut(privacy_settings=settings)


@router.post("", response_model=PrivacySettingsOut)
async def update_privacy(
    body: PrivacySettingsIn,
    principal: Annotated[Principal, Depends(require_user)],
    repo: Annotated[PrivacyRepo, Depends(get_privacy_repo)],
) -> PrivacySettingsOut:
    settings = await guarded(
        "update privacy settings",
        lambda: privacy_service.update_settings(
            repo, principal, body.privacy_settings
        ),
    )
    return PrivacySettingsOut(privacy_settings=settings)
