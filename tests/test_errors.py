from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from spacebook.services import bookings
from spacebook.utils.datetime import as_utc_iso, parse_datetime


@pytest.mark.parametrize(
    "raw",
    [
        "2099-01-01T10:00:00Z",
        "2099-01-01T10:00:00z",
        "2099-01-01 10:00:00",
        "2099-01-01T12:00:00+02:00",
        "2099-01-01T05:00:00-05:00",
    ],
)
def test_parse_datetime_normalizes_to_naive_utc(raw):
    assert parse_datetime(raw) == datetime(2099, 1, 1, 10)


@pytest.mark.parametrize("raw", [None, "", "   ", "tomorrow", 1234])
def test_parse_datetime_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_datetime(raw)


def test_as_utc_iso_marks_utc():
    assert as_utc_iso(datetime(2099, 1, 1, 10)) == "2099-01-01T10:00:00Z"
    assert as_utc_iso(None) is None


def test_unknown_route_renders_json(client):
    response = client.get("/nope")

    assert response.status_code == 404
    assert "error" in response.get_json()


def test_store_failure_is_reported_without_detail(client, student_headers, monkeypatch):
    def broken(**kwargs):
        raise OperationalError("SELECT secret_column", {}, Exception("connection refused"))

    monkeypatch.setattr(bookings, "book", broken)

    response = client.post(
        "/bookspace",
        json={"space_id": 1, "start_time": "2099-01-01T10:00:00", "end_time": "2099-01-01T11:00:00"},
        headers=student_headers,
    )

    assert response.status_code == 500
    assert response.get_json() == {"error": "internal server error"}


def test_unexpected_exception_is_reported_without_detail(client, student_headers, monkeypatch):
    def broken(user_id):
        raise KeyError("stack detail")

    monkeypatch.setattr(bookings, "bookings_for_user", broken)

    response = client.get("/viewbooking", headers=student_headers)

    assert response.status_code == 500
    assert "stack detail" not in response.get_data(as_text=True)


def test_health_reports_database(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "healthy", "database": "connected"}
