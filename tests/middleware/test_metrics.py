"""Prometheus metrics from the middleware and the report wrappers.

The default registry is process-global and counters never reset, so every
test asserts on the delta around the action.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from app.api import providers
from app.main import app
from tests.conftest import add_user, auth, mint_token

MARKS_TEMPLATE = "/v1/instructor/courses/{course_id}/marks"


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before == 1


def test_endpoint_label_is_the_route_template(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": MARKS_TEMPLATE, "status_code": "401"}
    before = _get_sample("http_requests_total", labels)

    client.get("/v1/instructor/courses/algebra/marks")
    client.get("/v1/instructor/courses/geometry/marks")

    assert _get_sample("http_requests_total", labels) - before == 2
    assert (
        REGISTRY.get_sample_value(
            "http_requests_total",
            {
                "method": "GET",
                "endpoint": "/v1/instructor/courses/algebra/marks",
                "status_code": "401",
            },
        )
        is None
    )


def test_unknown_paths_share_one_label(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "unmatched", "status_code": "404"}
    before = _get_sample("http_requests_total", labels)
    client.get("/no/such/thing")
    client.get("/another/miss")
    assert _get_sample("http_requests_total", labels) - before == 2


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before


def test_metrics_endpoint_exposes_report_series(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "report_build_duration_seconds" in resp.text
    assert "cache_operations_total" in resp.text


def test_report_build_is_timed(client: TestClient) -> None:
    add_user("teach-1", role="instructor")
    before = _get_sample("report_build_duration_seconds_count", {"report": "engagement"})
    client.get("/v1/instructor/analytics", headers=auth(mint_token("teach-1", ["instructor"])))
    after = _get_sample("report_build_duration_seconds_count", {"report": "engagement"})
    assert after - before == 1


def test_report_failure_is_counted(client: TestClient) -> None:
    class _Failing:
        async def get_course(self, course_id: str):
            raise RuntimeError("db gone")

    app.dependency_overrides[providers.get_gradebook_repo] = _Failing
    before = _get_sample("report_failures_total", {"report": "grades"})

    resp = client.get(
        "/v1/instructor/courses/algebra/marks",
        headers=auth(mint_token("teach-1", ["instructor"])),
    )

    assert resp.status_code == 500
    assert _get_sample("report_failures_total", {"report": "grades"}) - before == 1


def test_cache_hit_and_miss_are_counted(client: TestClient) -> None:
    miss = _get_sample("cache_operations_total", {"operation": "miss"})
    hit = _get_sample("cache_operations_total", {"operation": "hit"})

    client.get("/v1/search", params={"q": "metrics-probe"})
    client.get("/v1/search", params={"q": "metrics-probe"})

    assert _get_sample("cache_operations_total", {"operation": "miss"}) - miss == 1
    assert _get_sample("cache_operations_total", {"operation": "hit"}) - hit == 1
