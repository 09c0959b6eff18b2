"""
Tests for the tracker dashboard endpoints (api/tracker.py).
"""
from datetime import date, timedelta

from conftest import PATIENT_ID, api_error

SUMMARY_URL = f"/patients/{PATIENT_ID}/tracker/summary"
CYCLE_URL = f"/patients/{PATIENT_ID}/tracker/cycle"


def seed_entry(fake_db, day, **fields):
    return fake_db.seed("daily_entries", {"patient_id": PATIENT_ID, "date": day, **fields})[0]


def test_summary_explicit_range(client, fake_db):
    entry = seed_entry(fake_db, "2025-01-03", overall_mood=6)
    seed_entry(fake_db, "2025-01-05")
    fake_db.seed("food_events", {"daily_entry_id": entry["id"], "patient_id": PATIENT_ID})

    response = client.get(SUMMARY_URL, params={"from_date": "2025-01-01", "to_date": "2025-01-07"})

    assert response.status_code == 200
    body = response.json()
    assert body["patientId"] == PATIENT_ID
    assert body["fromDate"] == "2025-01-01"
    assert body["toDate"] == "2025-01-07"
    assert body["count"] == 2
    assert [d["date"] for d in body["days"]] == ["2025-01-05", "2025-01-03"]
    assert body["days"][1]["food_count"] == 1
    assert body["days"][1]["overall_mood"] == 6


def test_summary_empty_range(client, fake_db):
    response = client.get(SUMMARY_URL, params={"from_date": "2025-01-01", "to_date": "2025-01-07"})

    assert response.status_code == 200
    assert response.json()["count"] == 0
    assert response.json()["days"] == []


def test_summary_default_range_uses_tracking_window(client, fake_db):
    today = date.today()
    fake_db.seed("patient_configs", {"patient_id": PATIENT_ID, "tracking_window_days": 14, "edit_window_days": 7})
    seed_entry(fake_db, today.isoformat())
    seed_entry(fake_db, (today - timedelta(days=20)).isoformat())

    response = client.get(SUMMARY_URL)

    assert response.status_code == 200
    body = response.json()
    assert body["fromDate"] == (today - timedelta(days=14)).isoformat()
    assert body["toDate"] == today.isoformat()
    assert body["count"] == 1


def test_summary_default_range_without_config(client, fake_db):
    today = date.today()

    response = client.get(SUMMARY_URL)

    assert response.status_code == 200
    assert response.json()["fromDate"] == (today - timedelta(days=30)).isoformat()


def test_summary_inverted_range_returns_400(client):
    response = client.get(SUMMARY_URL, params={"from_date": "2025-01-07", "to_date": "2025-01-01"})

    assert response.status_code == 400
    assert "must not be after" in response.json()["detail"]


def test_summary_invalid_date_returns_400(client):
    response = client.get(SUMMARY_URL, params={"from_date": "01/07/2025", "to_date": "2025-01-08"})

    assert response.status_code == 400
    assert "from_date" in response.json()["detail"]


def test_summary_invalid_patient_uuid_returns_400(client):
    for invalid in ["not-a-uuid", "12345", "123e4567-e89b-12d3-a456"]:
        response = client.get(f"/patients/{invalid}/tracker/summary")
        assert response.status_code == 400, invalid
        assert "Invalid UUID format for patient_id" in response.json()["detail"]


def test_summary_database_failure_returns_500_with_operation(client, fake_db):
    fake_db.failures["daily_entries"] = api_error("connection refused")

    response = client.get(SUMMARY_URL, params={"from_date": "2025-01-01", "to_date": "2025-01-07"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Database error: get_daily_summary_range - daily_entries"
    assert "connection refused" not in response.text


def test_summary_uuid_syntax_error_from_database_returns_400(client, fake_db):
    fake_db.failures["daily_entries"] = api_error('invalid input syntax for type uuid: "x"', "22P02")

    response = client.get(SUMMARY_URL, params={"from_date": "2025-01-01", "to_date": "2025-01-07"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid identifier format in database query"


def test_cycle_range_endpoint(client, fake_db):
    entry = seed_entry(fake_db, "2025-01-02", cycle_day=3)
    fake_db.seed("cycle_logs", {
        "daily_entry_id": entry["id"],
        "patient_id": PATIENT_ID,
        "cycle_day": 0,
        "bleeding_quantity": "light",
    })

    response = client.get(CYCLE_URL, params={"from_date": "2025-01-01", "to_date": "2025-01-07"})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["days"][0]["cycle_day"] == 0
    assert body["days"][0]["bleeding_quantity"] == "light"
    assert body["days"][0]["formulation_adherence_percent"] == 0


def test_clinician_can_read_tracker(client, fake_db):
    seed_entry(fake_db, "2025-01-02")

    response = client.get(
        CYCLE_URL,
        params={"from_date": "2025-01-01", "to_date": "2025-01-07"},
        headers={"X-Viewer-Role": "clinician"},
    )

    assert response.status_code == 200
    assert response.json()["count"] == 1


def test_unknown_viewer_role_returns_400(client):
    response = client.get(SUMMARY_URL, headers={"X-Viewer-Role": "admin"})

    assert response.status_code == 400
    assert "X-Viewer-Role" in response.json()["detail"]
