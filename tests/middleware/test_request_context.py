from __future__ import annotations

import uuid

from fastapi.testclient import TestClient


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    uuid.UUID(resp.headers["x-request-id"])


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "ward-7-req"})
    assert resp.headers.get("x-request-id") == "ward-7-req"


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/v1/cpd")  # no token
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None
