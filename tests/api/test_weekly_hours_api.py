from __future__ import annotations

from fastapi.testclient import TestClient

RANGE = {"start_date": "2026-03-04", "end_date": "2026-03-17", "weekly_hours": 35}


def test_preview_prorates_partial_weeks(client: TestClient, headers: dict) -> None:
    resp = client.post(
        "/v1/weekly-hours/preview", json={**RANGE, "today": "2026-03-12"}, headers=headers
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_hours"] == 70.0
    assert body["completed_hours"] == 25.0
    assert body["pending_hours"] == 45.0
    assert [w["days_in_week"] for w in body["weeks"]] == [5, 7, 2]


def test_preview_applies_adjustments(client: TestClient, headers: dict) -> None:
    payload = {
        **RANGE,
        "adjustments": [
            {"week_index": 1, "hours": -7.5, "reason": "Sick leave"},
            {"week_index": 2, "hours": 0, "reason": "No-op"},
        ],
    }
    body = client.post("/v1/weekly-hours/preview", json=payload, headers=headers).json()
    assert body["total_hours"] == 62.5
    assert body["ignored_adjustments"] == 1
    assert body["weeks"][1]["adjustments"][0]["reason"] == "Sick leave"


def test_preview_unknown_week_is_422(client: TestClient, headers: dict) -> None:
    payload = {**RANGE, "adjustments": [{"week_index": 9, "hours": 2, "reason": "Extra"}]}
    resp = client.post("/v1/weekly-hours/preview", json=payload, headers=headers)
    assert resp.status_code == 422


def test_preview_defaults_weekly_hours(client: TestClient, headers: dict) -> None:
    body = client.post(
        "/v1/weekly-hours/preview",
        json={"start_date": "2026-03-09", "end_date": "2026-03-15"},
        headers=headers,
    ).json()
    assert body["weekly_hours"] == 37.5
    assert body["total_hours"] == 37.5


def test_preview_inverted_range_is_empty(client: TestClient, headers: dict) -> None:
    body = client.post(
        "/v1/weekly-hours/preview",
        json={"start_date": "2026-03-17", "end_date": "2026-03-04"},
        headers=headers,
    ).json()
    assert body["weeks"] == []
    assert body["total_hours"] == 0.0


def test_weekly_hours_out_of_range_is_422(client: TestClient, headers: dict) -> None:
    resp = client.post(
        "/v1/weekly-hours/preview", json={**RANGE, "weekly_hours": 200}, headers=headers
    )
    assert resp.status_code == 422


def test_saved_config_can_be_referenced(client: TestClient, headers: dict) -> None:
    saved = client.post("/v1/weekly-hours/configs", json=RANGE, headers=headers)
    assert saved.status_code == 201
    config = saved.json()
    assert config["id"] == 1
    assert config["total_hours"] == 70.0

    listed = client.get("/v1/weekly-hours/configs", headers=headers).json()
    assert [c["id"] for c in listed] == [1]

    resp = client.post(
        "/v1/practice-hours",
        json={
            "start_date": "2026-03-04",
            "end_date": "2026-03-17",
            "hours": config["total_hours"],
            "work_setting": "Acute ward",
            "scope": "Adult nursing",
            "registration": "Registered Nurse",
            "weekly_config_id": config["id"],
        },
        headers=headers,
    )
    assert resp.json()["weekly_config_id"] == 1
