"""read_through: hit/miss behavior and fail-open on backend errors."""

from __future__ import annotations

import asyncio

import pytest
from pydantic import BaseModel

from app.services.cache import InMemoryCacheService, read_through


class _Report(BaseModel):
    value: int


class _BrokenCache:
    """Every backend call fails."""

    async def get(self, key: str) -> str | None:
        raise ConnectionError("redis down")

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise ConnectionError("redis down")

    async def delete(self, key: str) -> None:
        raise ConnectionError("redis down")

    async def delete_pattern(self, pattern: str) -> None:
        raise ConnectionError("redis down")


class _Counter:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> _Report:
        self.calls += 1
        return _Report(value=42)


def test_miss_then_hit() -> None:
    cache = InMemoryCacheService()
    compute = _Counter()

    first = asyncio.run(read_through(cache, "k", 60, _Report, compute))
    second = asyncio.run(read_through(cache, "k", 60, _Report, compute))

    assert first == second == _Report(value=42)
    assert compute.calls == 1
    assert cache._store["k"] == '{"value":42}'


def test_backend_errors_fall_back_to_compute() -> None:
    compute = _Counter()
    result = asyncio.run(read_through(_BrokenCache(), "k", 60, _Report, compute))
    assert result == _Report(value=42)
    assert compute.calls == 1


def test_corrupt_entry_is_recomputed_and_replaced() -> None:
    cache = InMemoryCacheService()
    cache._store["k"] = "not json"
    compute = _Counter()

    result = asyncio.run(read_through(cache, "k", 60, _Report, compute))

    assert result.value == 42
    assert compute.calls == 1
    assert cache._store["k"] == '{"value":42}'


def test_compute_errors_propagate() -> None:
    async def boom() -> _Report:
        raise RuntimeError("db down")

    with pytest.raises(RuntimeError, match="db down"):
        asyncio.run(read_through(InMemoryCacheService(), "k", 60, _Report, boom))


def test_delete_pattern_matches_prefix() -> None:
    cache = InMemoryCacheService()
    cache._store.update({"search:a": "1", "search:b": "2", "analytics:x": "3"})
    asyncio.run(cache.delete_pattern("search:*"))
    assert list(cache._store) == ["analytics:x"]
