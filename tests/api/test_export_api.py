from __future__ import annotations

from fastapi.testclient import TestClient

CPD = {"date": "2026-02-10", "title": "IV therapy", "hours": 6, "participatory": True}


def test_export_contains_every_collection(client: TestClient, headers: dict) -> None:
    client.post("/v1/cpd", json=CPD, headers=headers)
    body = client.get("/v1/export", headers=headers).json()

    assert body["application"] == "RevalPro UK Nursing Revalidation"
    assert "exported_at" in body
    assert body["data"]["cpd"][0]["title"] == "IV therapy"
    assert body["data"]["weekly_hours_config"] == []
    assert set(body["data"]) >= {"practice_hours", "feedback", "reflections", "profile"}


def test_import_replaces_existing_records(client: TestClient, headers: dict) -> None:
    client.post("/v1/cpd", json=CPD, headers=headers)
    backup = client.get("/v1/export", headers=headers).json()

    client.post("/v1/cpd", json={**CPD, "title": "Added after backup"}, headers=headers)
    resp = client.post("/v1/import", json=backup, headers=headers)

    assert resp.status_code == 200
    assert resp.json()["imported"]["cpd"] == 1
    titles = [r["title"] for r in client.get("/v1/cpd", headers=headers).json()]
    assert titles == ["IV therapy"]


def test_import_rejects_foreign_document(client: TestClient, headers: dict) -> None:
    resp = client.post(
        "/v1/import", json={"application": "Other", "data": {}}, headers=headers
    )
    assert resp.status_code == 422


def test_import_rejects_invalid_record(client: TestClient, headers: dict) -> None:
    client.post("/v1/cpd", json=CPD, headers=headers)
    bad = {"data": {"cpd": [{"date": "2026-02-10", "title": "x", "hours": "lots"}]}}
    resp = client.post("/v1/import", json=bad, headers=headers)
    assert resp.status_code == 422
    assert len(client.get("/v1/cpd", headers=headers).json()) == 1


def test_import_rejects_malformed_weekly_breakdown(client: TestClient, headers: dict) -> None:
    config = {
        "id": 1,
        "start_date": "2026-03-04",
        "end_date": "2026-03-17",
        "weekly_hours": 35,
        "breakdown": ["not a week"],
        "total_hours": 70.0,
    }
    resp = client.post(
        "/v1/import", json={"data": {"weekly_hours_config": [config]}}, headers=headers
    )
    assert resp.status_code == 422
