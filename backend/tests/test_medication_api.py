"""
Tests for the medication check-in API and the "any done wins" rule
"""

import re
from datetime import date

from core.clock import today_local
from db.models import medication_record
from schemas.medication_record import MedicationRecordResponse
from services.adherence_ledger import derive_done_for_day


def record(client, elderly_id, record_date, status):
    return client.post(
        "/api/v1/medication",
        json={"elderly_id": elderly_id, "record_date": record_date, "status": status},
    )


def make_record(record_id, record_date, status):
    return MedicationRecordResponse(
        id=record_id, elderly_id=1, record_date=record_date, status=status, created_at="2024-01-01T08:00:00"
    )


class TestCreateRecord:
    """POST /api/v1/medication"""

    def test_create_record(self, client, create_elderly):
        elder = create_elderly()

        response = record(client, elder["id"], "2024-03-01", "done")

        assert response.status_code == 201
        data = response.json()
        assert data["id"] > 0
        assert data["elderly_id"] == elder["id"]
        assert data["record_date"] == "2024-03-01"
        assert data["status"] == "done"
        assert re.match(r"^\d{2}:\d{2}$", data["record_time"])
        assert re.match(r"^\d{2}/\d{2} \d{2}:\d{2}$", data["created_time"])

    def test_camel_case_fields_accepted(self, client, create_elderly):
        elder = create_elderly()

        response = client.post(
            "/api/v1/medication",
            json={"elderlyId": elder["id"], "recordDate": "2024-03-01", "status": "undone"},
        )

        assert response.status_code == 201
        assert response.json()["status"] == "undone"

    def test_same_day_records_are_not_merged(self, client, create_elderly, count_rows):
        elder = create_elderly()

        record(client, elder["id"], "2024-03-01", "done")
        record(client, elder["id"], "2024-03-01", "undone")

        assert count_rows(medication_record) == 2

    def test_invalid_input(self, client, create_elderly, count_rows):
        elder = create_elderly()

        bad_bodies = [
            {"elderly_id": elder["id"], "record_date": "2024-03-01", "status": "skipped"},
            {"elderly_id": elder["id"], "record_date": "2024-03-01"},
            {"elderly_id": elder["id"], "status": "done"},
            {"record_date": "2024-03-01", "status": "done"},
            {"elderly_id": elder["id"], "record_date": "03/01/2024", "status": "done"},
            {"elderly_id": "abc", "record_date": "2024-03-01", "status": "done"},
        ]
        for body in bad_bodies:
            response = client.post("/api/v1/medication", json=body)
            assert response.status_code == 400, body
            assert response.json()["error"] == "invalid_input"

        assert count_rows(medication_record) == 0

    def test_unknown_elderly(self, client):
        response = record(client, 999, "2024-03-01", "done")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestListAndUpdate:
    """GET and PATCH /api/v1/medication"""

    def test_list_newest_first(self, client, create_elderly):
        elder = create_elderly()
        ids = [record(client, elder["id"], "2024-03-0%d" % day, "done").json()["id"] for day in (1, 2, 3)]

        response = client.get("/api/v1/medication", params={"elderly_id": elder["id"]})

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == list(reversed(ids))

    def test_list_scoped_to_profile(self, client, create_elderly):
        first = create_elderly()
        second = create_elderly(name="李爷爷")
        record(client, first["id"], "2024-03-01", "done")

        response = client.get("/api/v1/medication", params={"elderly_id": second["id"]})

        assert response.json() == []

    def test_list_requires_elderly_id(self, client):
        response = client.get("/api/v1/medication")

        assert response.status_code == 400

    def test_update_status(self, client, create_elderly):
        elder = create_elderly()
        created = record(client, elder["id"], "2024-03-01", "undone").json()

        response = client.patch("/api/v1/medication", json={"id": created["id"], "status": "done"})

        assert response.status_code == 200
        assert response.json()["status"] == "done"
        assert response.json()["created_at"] == created["created_at"]

    def test_update_unknown_record(self, client):
        response = client.patch("/api/v1/medication", json={"id": 31337, "status": "done"})

        assert response.status_code == 404

    def test_update_invalid_status(self, client, create_elderly):
        elder = create_elderly()
        created = record(client, elder["id"], "2024-03-01", "undone").json()

        response = client.patch("/api/v1/medication", json={"id": created["id"], "status": "maybe"})

        assert response.status_code == 400


class TestDoneForDay:
    """A done record for the day is never retracted by a later undone"""

    def test_done_then_undone(self):
        records = [make_record(2, "2024-03-01", "undone"), make_record(1, "2024-03-01", "done")]

        assert derive_done_for_day(records, date(2024, 3, 1)) is True

    def test_undone_then_done(self):
        records = [make_record(2, "2024-03-01", "done"), make_record(1, "2024-03-01", "undone")]

        assert derive_done_for_day(records, date(2024, 3, 1)) is True

    def test_other_days_ignored(self):
        records = [make_record(1, "2024-02-29", "done"), make_record(2, "2024-03-01", "undone")]

        assert derive_done_for_day(records, date(2024, 3, 1)) is False
        assert derive_done_for_day([], date(2024, 3, 1)) is False

    def test_today_endpoint_is_sticky(self, client, create_elderly):
        elder = create_elderly()
        today = today_local().isoformat()

        assert client.get("/api/v1/medication/today", params={"elderly_id": elder["id"]}).json()["done"] is False

        record(client, elder["id"], today, "done")
        record(client, elder["id"], today, "undone")

        response = client.get("/api/v1/medication/today", params={"elderly_id": elder["id"]})
        assert response.json() == {"elderly_id": elder["id"], "record_date": today, "done": True}
