from __future__ import annotations

from datetime import date, timedelta

from fastapi.testclient import TestClient


def test_settings_default_and_update(client: TestClient, headers: dict) -> None:
    assert client.get("/v1/reminders/settings", headers=headers).json()["enabled"] is False

    resp = client.put("/v1/reminders/settings", json={"enabled": True}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["enabled"] is True
    assert body["weekly_progress"] is True


def test_schedule_needs_expiry_date(client: TestClient, headers: dict) -> None:
    client.put("/v1/reminders/settings", json={"enabled": True}, headers=headers)
    resp = client.post("/v1/reminders/schedule", json={}, headers=headers)
    assert resp.status_code == 422


def test_schedule_revalidation_reminders(client: TestClient, headers: dict) -> None:
    client.put("/v1/reminders/settings", json={"enabled": True}, headers=headers)
    expiry = (date.today() + timedelta(days=400)).isoformat()
    client.put("/v1/profile", json={"name": "Sam", "expiry_date": expiry}, headers=headers)

    resp = client.post(
        "/v1/reminders/schedule", json={"cpd": True}, headers=headers
    )
    assert resp.status_code == 200
    types = [r["type"] for r in resp.json()]
    assert types.count("revalidation") == 2
    assert types.count("deadline") == 2
    assert types.count("cpd") == 1

    # nothing is due yet
    assert client.get("/v1/reminders", headers=headers).json() == []


def test_schedule_while_disabled_creates_nothing(client: TestClient, headers: dict) -> None:
    resp = client.post(
        "/v1/reminders/schedule",
        json={"revalidation": False, "reflection": True},
        headers=headers,
    )
    assert resp.json() == []


def test_mark_unknown_reminder_is_404(client: TestClient, headers: dict) -> None:
    resp = client.post("/v1/reminders/nope/read", headers=headers)
    assert resp.status_code == 404


def test_clear_old_reports_count(client: TestClient, headers: dict) -> None:
    resp = client.post("/v1/reminders/clear-old", headers=headers)
    assert resp.json() == {"removed": 0}
