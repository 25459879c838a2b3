"""Application metrics using the Prometheus client library.

Single inventory of everything the service measures.  HTTP-level
metrics are recorded by MetricsMiddleware; lifecycle metrics are
recorded by the services at the point of action.

Counters only go up, so dashboards read them through rate():

  rate(certification_operations_total{operation="issue",result="ok"}[5m])

The result label is either "ok" or the error kind that rejected the
call ("Paused", "Unauthorized", ...), which keeps the label set bounded
by the error taxonomy.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (recorded by MetricsMiddleware)
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
# Lifecycle metrics (recorded by the services)
# ---------------------------------------------------------------------------

CERTIFICATION_OPERATIONS = Counter(
    "certification_operations_total",
    "Lifecycle operations by operation name and outcome",
    ["operation", "result"],  # result: "ok" or the rejecting error kind
)

VERIFICATION_RESULTS = Counter(
    "certification_verifications_total",
    "Verification lookups by outcome",
    ["result"],  # "valid", "invalid", "not_found"
)

SYSTEM_PAUSED = Gauge(
    "certification_system_paused",
    "1 while lifecycle mutations are paused, else 0",
)
