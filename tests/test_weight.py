"""
Tests for the weight log: upsert-by-day, latest, weekly history, trend.
"""
from __future__ import annotations

from decimal import Decimal

import pytest

from app.core.errors import FutureDayError
from app.models.weight_entry import WeightEntry
from app.services import weight as weight_service


def _put(client, weight, day=None) -> dict:
    payload = {"weight": weight}
    if day:
        payload["day"] = day
    r = client.put("/weight", json=payload)
    assert r.status_code == 200
    return r.json()


class TestUpsert:
    def test_defaults_to_today(self, client, clock):
        body = _put(client, 72.4)
        assert body["day"] == clock.today
        assert body["weight"] == 72.4
        assert body["created"] is True

    def test_same_day_keeps_latest(self, client, db):
        first = _put(client, 80.0, "2026-03-01")
        second = _put(client, 79.5, "2026-03-01")
        assert second["created"] is False
        assert second["id"] == first["id"]
        assert db.query(WeightEntry).filter(WeightEntry.day == "2026-03-01").count() == 1
        listed = client.get("/weight").json()
        assert listed["total"] == 1
        assert listed["items"][0]["weight"] == 79.5

    def test_different_days_are_separate(self, client):
        _put(client, 80.0, "2026-03-01")
        _put(client, 79.0, "2026-03-02")
        assert client.get("/weight").json()["total"] == 2

    def test_future_day_rejected(self, client, clock):
        _put(client, 70.0)
        r = client.put("/weight", json={"weight": 99, "day": "2030-01-01"})
        assert r.status_code == 422
        assert r.json()["code"] == "FUTURE_DAY"
        assert r.json()["details"] == {"day": "2030-01-01", "today": clock.today}
        latest = client.get("/weight/latest").json()
        assert latest == {"id": latest["id"], "day": clock.today, "weight": 70.0}
        assert client.get("/weight").json()["total"] == 1

    def test_service_rejects_day_after_today(self, db):
        with pytest.raises(FutureDayError):
            weight_service.upsert_weight(db, Decimal("70.00"), "2026-03-11", today="2026-03-10")
        assert db.query(WeightEntry).count() == 0

    @pytest.mark.parametrize("weight", [0, -1, 1000, "heavy"])
    def test_invalid_weight_rejected(self, client, weight):
        r = client.put("/weight", json={"weight": weight})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_invalid_day_rejected(self, client):
        r = client.put("/weight", json={"weight": 70, "day": "2026-02-30"})
        assert r.status_code == 422

    def test_service_returns_created_flag(self, db):
        entry, created = weight_service.upsert_weight(db, Decimal("70.10"), "2026-04-01")
        assert created is True
        entry, created = weight_service.upsert_weight(db, Decimal("69.90"), "2026-04-01")
        assert created is False
        assert entry.weight == Decimal("69.90")


class TestReads:
    def test_list_newest_first_paginated(self, client):
        for day, w in [("2026-03-01", 80), ("2026-03-03", 79), ("2026-03-02", 79.5)]:
            _put(client, w, day)
        body = client.get("/weight?limit=2").json()
        assert body["total"] == 3
        assert [e["day"] for e in body["items"]] == ["2026-03-03", "2026-03-02"]
        rest = client.get("/weight?limit=2&offset=2").json()
        assert [e["day"] for e in rest["items"]] == ["2026-03-01"]

    def test_latest_is_by_day_not_insertion(self, client):
        _put(client, 78.0, "2026-03-05")
        _put(client, 81.0, "2026-02-01")
        body = client.get("/weight/latest").json()
        assert body["day"] == "2026-03-05"
        assert body["weight"] == 78.0

    def test_latest_empty_404(self, client):
        r = client.get("/weight/latest")
        assert r.status_code == 404
        assert r.json()["code"] == "WEIGHT_NOT_FOUND"

    def test_weekly_history(self, client, clock):
        clock.today = "2026-03-20"  # a Friday
        _put(client, 80.0, "2026-03-14")
        _put(client, 79.0, "2026-03-20")
        _put(client, 79.0, "2026-03-13")  # outside the 7-day window
        days = client.get("/weight/history").json()
        assert len(days) == 7
        assert days[0]["day"] == "2026-03-14"
        assert days[-1] == {"day": "2026-03-20", "weekday": "Fri", "has_entry": True, "is_today": True}
        assert [d["has_entry"] for d in days] == [True, False, False, False, False, False, True]

    def test_trend(self, client, clock):
        clock.today = "2026-03-20"
        _put(client, 85.0, "2026-03-01")  # older than 14 days
        _put(client, 80.0, "2026-03-10")
        _put(client, 79.0, "2026-03-15")
        _put(client, 78.5, "2026-03-20")
        body = client.get("/weight/trend").json()
        assert body["since"] == "2026-03-06"
        assert body["until"] == "2026-03-20"
        assert [p["day"] for p in body["points"]] == ["2026-03-10", "2026-03-15", "2026-03-20"]
        assert body["minimum"] == 78.5
        assert body["maximum"] == 80.0
        assert body["change"] == -1.5

    def test_trend_custom_lookback(self, client, clock):
        clock.today = "2026-03-20"
        _put(client, 80.0, "2026-03-10")
        _put(client, 79.0, "2026-03-18")
        body = client.get("/weight/trend?days=3").json()
        assert [p["day"] for p in body["points"]] == ["2026-03-18"]
        assert body["change"] == 0.0

    def test_trend_empty(self, client):
        body = client.get("/weight/trend").json()
        assert body["points"] == []
        assert body["minimum"] is None
        assert body["change"] is None
