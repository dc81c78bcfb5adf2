"""Prometheus metric inventory.

All metrics are declared here; other modules import the one they need and
increment or observe it at the point of action.  The HTTP metrics are fed
by MetricsMiddleware, the rest by the report builders and the cache helper.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Reporting metrics
# ---------------------------------------------------------------------------

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Report cache lookups by result",
    ["operation"],  # hit|miss|error
)

REPORT_DURATION = Histogram(
    "report_build_duration_seconds",
    "Time spent building a report from the data store (cache misses only)",
    ["report"],  # grades|engagement|search|dashboard|timeframe
    # Aggregations fan out several queries, so start above the HTTP buckets.
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

REPORT_FAILURES = Counter(
    "report_failures_total",
    "Report builds that ended in an upstream error",
    ["report"],
)
