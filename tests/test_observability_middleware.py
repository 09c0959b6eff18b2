# tests/test_observability_middleware.py
"""
Tests for observability middleware.
"""
from api.middleware import _patient_hash_from_path
from api.utils import hash_user_id_for_logging
from conftest import PATIENT_ID


def test_middleware_adds_request_id_header(client):
    """Test that middleware adds X-Request-ID header to response"""
    response = client.get("/")

    assert "X-Request-ID" in response.headers
    request_id = response.headers["X-Request-ID"]
    assert len(request_id) == 36
    assert request_id.count('-') == 4


def test_middleware_adds_response_time_header(client):
    """Test that middleware adds X-Response-Time header to response"""
    response = client.get("/")

    assert "X-Response-Time" in response.headers
    # Should be in format "123.45ms"
    response_time = response.headers["X-Response-Time"]
    assert response_time.endswith("ms")
    assert float(response_time[:-2]) >= 0


def test_middleware_unique_request_ids(client):
    response1 = client.get("/")
    response2 = client.get("/")

    assert response1.headers["X-Request-ID"] != response2.headers["X-Request-ID"]


def test_middleware_works_with_tracker_endpoint(client):
    response = client.get(
        f"/patients/{PATIENT_ID}/tracker/summary",
        params={"from_date": "2025-01-01", "to_date": "2025-01-07"},
    )

    assert response.status_code == 200
    assert "X-Request-ID" in response.headers
    assert "X-Response-Time" in response.headers


def test_middleware_headers_present_on_error_responses(client):
    response = client.get(f"/patients/{PATIENT_ID}/daily/not-a-date")

    assert response.status_code == 400
    assert "X-Request-ID" in response.headers
    assert "X-Response-Time" in response.headers


def test_patient_hash_from_path():
    assert _patient_hash_from_path(f"/patients/{PATIENT_ID}/tracker/cycle") == hash_user_id_for_logging(PATIENT_ID)
    assert _patient_hash_from_path("/health") is None
    assert _patient_hash_from_path("/patients") is None


def test_request_log_carries_patient_hash(client, caplog):
    with caplog.at_level("INFO", logger="myayu-api.middleware"):
        client.get(f"/patients/{PATIENT_ID}/config")

    started = [r.getMessage() for r in caplog.records if "Request started" in r.getMessage()]
    assert started
    assert hash_user_id_for_logging(PATIENT_ID) in started[0]
    assert PATIENT_ID not in started[0]
