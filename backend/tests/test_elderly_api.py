"""
Tests for the elderly profile API: replace-all saves, plan filtering, schedule
"""

import asyncio

import services.plan_store
from db.models import elderly, medication_plan, medication_time
from schemas.elderly import PlanPayload
from services.locks import elderly_locks
from services.plan_store import PlanStore

PLANS = [
    {"medication": {"name": "阿司匹林", "quantity": 1, "unit": "片"}, "times": ["08:00", "20:00"], "note": "饭后"},
    {"medication": {"name": "降压药", "quantity": 2, "unit": "粒"}, "times": ["08:00"]},
]


def strip_ids(plans):
    return sorted(
        (p["medication"]["name"], p["medication"]["quantity"], p["medication"]["unit"], tuple(p["times"]), p["note"])
        for p in plans
    )


class TestSaveProfile:
    """POST /api/v1/elderly"""

    def test_create_profile(self, client):
        response = client.post("/api/v1/elderly", json={"name": "王阿姨", "plans": PLANS})

        assert response.status_code == 200
        data = response.json()
        assert data["id"] > 0
        assert data["name"] == "王阿姨"
        assert data["familyCode"].startswith("YAO-")
        assert [p["medication"]["name"] for p in data["plans"]] == ["阿司匹林", "降压药"]
        assert data["plans"][0]["times"] == ["08:00", "20:00"]
        assert data["plans"][0]["note"] == "饭后"
        assert data["plans"][1]["note"] is None

    def test_name_required(self, client, count_rows):
        for body in ({"plans": PLANS}, {"name": "", "plans": PLANS}, {"name": "   "}):
            response = client.post("/api/v1/elderly", json=body)
            assert response.status_code == 400
            assert response.json()["error"] == "invalid_input"

        assert count_rows(elderly) == 0

    def test_resave_replaces_without_accumulating(self, client, create_elderly, count_rows):
        first = create_elderly(plans=PLANS)

        response = client.post("/api/v1/elderly", json={"id": first["id"], "name": "王阿姨", "plans": PLANS})

        assert response.status_code == 200
        second = response.json()
        assert second["id"] == first["id"]
        assert strip_ids(second["plans"]) == strip_ids(first["plans"])
        assert {p["id"] for p in second["plans"]}.isdisjoint({p["id"] for p in first["plans"]})
        assert count_rows(medication_plan) == 2
        assert count_rows(medication_time) == 3

    def test_invalid_plans_are_dropped(self, client):
        plans = [
            {"medication": {"name": "", "quantity": 1}, "times": ["08:00"]},
            {"medication": {"name": "A", "quantity": 0}, "times": ["08:00"]},
            {"medication": {"name": "B", "quantity": 2}, "times": ["08:00"]},
        ]

        response = client.post("/api/v1/elderly", json={"name": "李爷爷", "plans": plans})

        assert response.status_code == 200
        saved = response.json()["plans"]
        assert len(saved) == 1
        assert saved[0]["medication"]["name"] == "B"
        assert saved[0]["times"] == ["08:00"]

    def test_malformed_plan_entries_are_dropped(self, client):
        plans = [
            "not a plan",
            {"times": ["08:00"]},
            {"medication": {"name": "C", "quantity": "abc"}},
            {"medication": {"name": "D", "quantity": "1.5"}, "times": "08:00"},
        ]

        response = client.post("/api/v1/elderly", json={"name": "李爷爷", "plans": plans})

        assert response.status_code == 200
        saved = response.json()["plans"]
        assert [p["medication"]["name"] for p in saved] == ["D"]
        assert saved[0]["medication"]["quantity"] == 1.5
        assert saved[0]["times"] == []

    def test_empty_and_malformed_times_skipped(self, client):
        plans = [{"medication": {"name": "A", "quantity": 1}, "times": ["", "8:00", "25:00", "21:30"]}]

        response = client.post("/api/v1/elderly", json={"name": "张奶奶", "plans": plans})

        assert response.json()["plans"][0]["times"] == ["08:00", "21:30"]

    def test_rename_keeps_family_code(self, client, create_elderly):
        first = create_elderly(plans=PLANS)

        response = client.post("/api/v1/elderly", json={"id": str(first["id"]), "name": "王奶奶", "plans": []})

        data = response.json()
        assert data["name"] == "王奶奶"
        assert data["familyCode"] == first["familyCode"]
        assert data["plans"] == []

    def test_explicit_family_code_wins(self, client, create_elderly):
        first = create_elderly()

        response = client.post(
            "/api/v1/elderly",
            json={"id": first["id"], "name": "王阿姨", "familyCode": "YAO-CUSTOM01"},
        )

        assert response.json()["familyCode"] == "YAO-CUSTOM01"

    def test_family_code_owned_by_other_profile_rejected(self, client, create_elderly):
        first = create_elderly()

        response = client.post(
            "/api/v1/elderly", json={"name": "李爷爷", "familyCode": first["familyCode"]}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"

    def test_non_numeric_id_creates_new_profile(self, client, create_elderly):
        first = create_elderly()

        response = client.post("/api/v1/elderly", json={"id": "abc", "name": "李爷爷"})

        assert response.status_code == 200
        assert response.json()["id"] != first["id"]

    def test_unknown_id_not_found(self, client, count_rows):
        response = client.post("/api/v1/elderly", json={"id": 9999, "name": "李爷爷"})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert count_rows(elderly) == 0


class TestSaveAtomicity:
    """A failed save leaves the previous plans; saves for one profile do not interleave"""

    def test_failure_mid_save_rolls_back(self, client, create_elderly, monkeypatch):
        created = create_elderly(plans=PLANS)

        def broken_normalize(value):
            raise RuntimeError("disk full")

        monkeypatch.setattr(services.plan_store, "normalize_hhmm", broken_normalize)
        response = client.post(
            "/api/v1/elderly",
            json={"id": created["id"], "name": "王奶奶", "plans": [{"medication": {"name": "B", "quantity": 1}, "times": ["09:00"]}]},
        )
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json()["error"] == "store_failure"
        assert client.get(f"/api/v1/elderly/{created['id']}").json() == created

    def test_concurrent_saves_do_not_accumulate(self, client, create_elderly, count_rows):
        created = create_elderly(plans=PLANS)
        plans = [
            PlanPayload(medication={"name": "A", "quantity": 1}, times=["08:00"]),
            PlanPayload(medication={"name": "B", "quantity": 2}, times=["20:00"]),
        ]

        async def save_many():
            return await asyncio.gather(
                *(PlanStore.save_profile(created["id"], "王阿姨", plans) for _ in range(8))
            )

        results = client.portal.call(save_many)

        assert len(results) == 8
        assert count_rows(medication_plan) == 2
        assert count_rows(medication_time) == 2
        assert results[-1].family_code == created["familyCode"]
        assert len(elderly_locks) == 0


class TestGetProfile:
    """GET /api/v1/elderly/{id}"""

    def test_get_profile(self, client, create_elderly):
        created = create_elderly(plans=PLANS)

        response = client.get(f"/api/v1/elderly/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_not_found(self, client):
        response = client.get("/api/v1/elderly/12345")

        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "message": "elderly not found"}

    def test_malformed_id(self, client):
        for bad in ("abc", "0", "-3"):
            response = client.get(f"/api/v1/elderly/{bad}")
            assert response.status_code == 400
            assert response.json()["error"] == "invalid_input"


class TestSchedule:
    """GET /api/v1/elderly/{id}/schedule"""

    def test_schedule_groups_and_active_window(self, client, create_elderly):
        created = create_elderly(plans=PLANS)

        response = client.get(
            f"/api/v1/elderly/{created['id']}/schedule", params={"at": "2024-01-01T07:45:00"}
        )

        assert response.status_code == 200
        data = response.json()
        assert [w["time"] for w in data["schedule"]] == ["08:00", "20:00"]
        assert data["schedule"][0]["label"] == "上午 08:00"
        assert [m["name"] for m in data["schedule"][0]["medications"]] == ["阿司匹林", "降压药"]
        assert data["active"]["time"] == "08:00"

    def test_no_active_window(self, client, create_elderly):
        created = create_elderly(plans=PLANS)

        response = client.get(
            f"/api/v1/elderly/{created['id']}/schedule", params={"at": "2024-01-01T14:00:00"}
        )

        assert response.json()["active"] is None

    def test_schedule_unknown_profile(self, client):
        response = client.get("/api/v1/elderly/777/schedule")

        assert response.status_code == 404
