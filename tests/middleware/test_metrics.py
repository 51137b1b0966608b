"""Prometheus counters cannot be reset between tests, so every assertion
compares a value read before the action with one read after it."""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before == 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    assert _get_sample("http_request_duration_seconds_count", labels) - before == 1


def test_metrics_scrape_is_not_counted(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before


def test_record_store_operations_are_exposed(client: TestClient, headers: dict) -> None:
    labels = {"kind": "cpd", "operation": "add"}
    before = _get_sample("record_store_operations_total", labels)
    client.post(
        "/v1/cpd",
        json={"date": "2026-02-10", "title": "IV therapy", "hours": 6},
        headers=headers,
    )
    assert _get_sample("record_store_operations_total", labels) - before == 1

    text = client.get("/metrics").text
    assert "record_store_operations_total" in text
    assert "progress_calculations_total" in text
