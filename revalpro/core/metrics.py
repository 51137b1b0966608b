"""Prometheus metric inventory.

Every metric the service exposes is declared here; the modules that own
the behaviour import and increment them.  Prometheus scrapes the values
from GET /metrics.
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
# Revalidation metrics
# ---------------------------------------------------------------------------

PROGRESS_CALCULATIONS = Counter(
    "progress_calculations_total",
    "Revalidation progress computations by resulting status",
    ["status"],  # NOT_STARTED|IN_PROGRESS|COMPLETED|ATTENTION
)

WEEKLY_HOURS_RECALCULATIONS = Counter(
    "weekly_hours_recalculations_total",
    "Weekly hours allocator state changes by operation",
    ["operation"],  # generate|update_weekly_hours|add_adjustment|remove_adjustment
)

RECORD_STORE_OPERATIONS = Counter(
    "record_store_operations_total",
    "Record repository operations by kind and operation",
    ["kind", "operation"],  # operation: add|update|remove|list|import
)

RECORDS_REJECTED = Counter(
    "records_rejected_total",
    "Records that failed validation at the persistence boundary",
    ["kind"],
)

REMINDERS_SCHEDULED = Counter(
    "reminders_scheduled_total",
    "Reminders scheduled by type",
    ["type"],  # revalidation|deadline|progress|cpd|reflection
)
