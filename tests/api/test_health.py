from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.api import health


class _DeadRedis:
    async def ping(self) -> bool:
        raise ConnectionError("connection refused")


class _LiveRedis:
    async def ping(self) -> bool:
        return True


def test_health_without_backing_stores(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "checks": {"redis": "not_configured", "database": "not_configured"},
    }


def test_health_reports_live_redis(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(health, "redis_pool", _LiveRedis())
    assert client.get("/health").json()["checks"]["redis"] == "ok"


def test_failing_redis_degrades_but_still_answers(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(health, "redis_pool", _DeadRedis())
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    assert resp.json()["checks"]["redis"] == "degraded"


def test_ready_returns_200(client: TestClient) -> None:
    assert client.get("/ready").status_code == 200
