"""Unified search endpoint.  Authentication is optional."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.dependencies import optional_user
from app.api.providers import get_cache, get_search_repo
from app.api.reporting import run_report
from app.models.principal import Principal
from app.models.search import SearchPage
from app.repos.search_repo import SearchRepo
from app.services.cache import CacheService, read_through
from app.services.search_service import (
    SEARCH_CACHE_TTL_SECONDS,
    cache_key,
    can_see_private,
    parse_search_params,
    search,
)

router = APIRouter(prefix="/v1", tags=["search"])


@router.get("/search", response_model=SearchPage)
async def unified_search(
    request: Request,
    principal: Annotated[Principal | None, Depends(optional_user)],
    repo: Annotated[SearchRepo, Depends(get_search_repo)],
    cache: Annotated[CacheService, Depends(get_cache)],
) -> SearchPage:
    params = parse_search_params(request.query_params)
    private = can_see_private(params, principal)

    def compute():
        return run_report("search", lambda: search(repo, params, private=private))

    # Results that include private content are never shared through the cache.
    if private:
        return await compute()
    return await read_through(
        cache, cache_key(params), SEARCH_CACHE_TTL_SECONDS, SearchPage, compute
    )
