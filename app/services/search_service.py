"""Unified search over courses, lessons, modules, instructors and discussions.

A single-type search pages through that type's own matches.  The ``all``
view takes the top five of each type, concatenates them in the fixed
``ENTITY_KINDS`` order and re-sorts that union in process, while its
``total`` is the sum of the per-type counts.  ``total`` can therefore exceed
what paging through ``all`` will ever return; clients wanting the full set
page per type.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import math
from collections.abc import Mapping

from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError, validation_details
from app.models.principal import Principal
from app.models.search import (
    ENTITY_KINDS,
    TYPE_TO_KIND,
    EntityKind,
    Pagination,
    SearchCriteria,
    SearchHit,
    SearchPage,
    SearchParams,
    SortKey,
)
from app.repos.search_repo import SearchRepo

logger = logging.getLogger(__name__)

PER_TYPE_IN_ALL = 5
SEARCH_CACHE_TTL_SECONDS = 3600
FACET_PREFIX = "filters."


def parse_search_params(query: Mapping[str, str]) -> SearchParams:
    """Build SearchParams from flat query parameters.

    Facets arrive as ``filters.<name>``; empty values count as absent.
    """
    top: dict[str, str] = {}
    facets: dict[str, str] = {}
    for key, value in query.items():
        if value == "":
            continue
        if key.startswith(FACET_PREFIX):
            facets[key[len(FACET_PREFIX) :]] = value
        else:
            top[key] = value
    try:
        return SearchParams.model_validate({**top, "filters": facets})
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid search parameters", details=validation_details(exc.errors())
        ) from None


def can_see_private(params: SearchParams, principal: Principal | None) -> bool:
    return (
        params.include_private == "yes"
        and principal is not None
        and principal.can_see_private()
    )


def cache_key(params: SearchParams) -> str:
    """Stable key over the normalized params."""
    raw = json.dumps(params.model_dump(mode="json"), sort_keys=True)
    return "search:" + hashlib.sha256(raw.encode()).hexdigest()


def popularity(hit: SearchHit) -> int:
    if hit.result_type == "course":
        return hit.enrollment_count
    if hit.result_type == "instructor":
        return hit.course_count
    if hit.result_type == "discussion":
        return hit.comment_count
    return 0


def resort_union(hits: list[SearchHit], sort: SortKey) -> list[SearchHit]:
    if sort == "newest":
        return sorted(hits, key=lambda h: h.created_at, reverse=True)
    if sort == "oldest":
        return sorted(hits, key=lambda h: h.created_at)
    if sort == "popular":
        return sorted(hits, key=popularity, reverse=True)
    return list(hits)


def _pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit) if total else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_more=page < total_pages,
    )


async def _search_one(
    repo: SearchRepo, kind: EntityKind, criteria: SearchCriteria, params: SearchParams
) -> tuple[list[SearchHit], int]:
    skip = (params.page - 1) * params.limit
    return await asyncio.gather(
        repo.fetch(kind, criteria, params.sort, skip, params.limit),
        repo.count(kind, criteria),
    )


async def _search_all(
    repo: SearchRepo, criteria: SearchCriteria, params: SearchParams
) -> tuple[list[SearchHit], int]:
    pages, counts = await asyncio.gather(
        asyncio.gather(
            *(
                repo.fetch(kind, criteria, params.sort, 0, PER_TYPE_IN_ALL)
                for kind in ENTITY_KINDS
            )
        ),
        asyncio.gather(*(repo.count(kind, criteria) for kind in ENTITY_KINDS)),
    )
    union = resort_union([hit for page in pages for hit in page], params.sort)
    start = (params.page - 1) * params.limit
    return union[start : start + params.limit], sum(counts)


async def search(
    repo: SearchRepo, params: SearchParams, *, private: bool = False
) -> SearchPage:
    criteria = SearchCriteria(
        query=params.q, filters=params.filters, can_see_private=private
    )
    if params.type == "all":
        hits, total = await _search_all(repo, criteria, params)
    else:
        hits, total = await _search_one(
            repo, TYPE_TO_KIND[params.type], criteria, params
        )
    logger.debug(
        "Search type=%s sort=%s page=%d hits=%d total=%d",
        params.type,
        params.sort,
        params.page,
        len(hits),
        total,
    )
    return SearchPage(
        data=hits,
        pagination=_pagination(params.page, params.limit, total),
        query=params.q,
        type=params.type,
        filters=params.filters,
    )
