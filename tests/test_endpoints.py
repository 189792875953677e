"""
Smoke tests for the application wiring.
"""
import pytest

from app.services import day_keys


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "ok"
        assert body["db"] == "ok"
        assert day_keys.is_day_key(body["today"])


class TestOpenAPI:
    def test_routes_registered(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        for path in [
            "/habits",
            "/habits/reconcile",
            "/habits/{habit_id}",
            "/habits/{habit_id}/check-in",
            "/habits/{habit_id}/check-ins",
            "/habits/{habit_id}/calendar",
            "/habits/{habit_id}/calendar/month",
            "/weight",
            "/weight/latest",
            "/weight/history",
            "/weight/trend",
        ]:
            assert path in paths


class TestStartupReconciliation:
    def test_broken_streak_reset_at_startup(self, db):
        from fastapi.testclient import TestClient

        from app.main import app
        from app.models.habit import Habit

        stale = day_keys.add_days(day_keys.today(), -3)
        db.add(Habit(
            name="Stale", target_days=7, current_streak=4, best_streak=4,
            last_check_in_date=stale, is_active=True, created_at=stale,
        ))
        db.commit()

        with TestClient(app):
            pass

        db.expire_all()
        habit = db.query(Habit).filter(Habit.name == "Stale").one()
        assert habit.current_streak == 0
        assert habit.best_streak == 4

    def test_persistence_failure_aborts_startup(self, monkeypatch):
        from fastapi.testclient import TestClient

        from app import main
        from app.core.errors import PersistenceError

        def failing_reconcile(db, today):
            raise PersistenceError("reconcile_streaks")

        monkeypatch.setattr(main, "reconcile_streaks", failing_reconcile)
        with pytest.raises(PersistenceError):
            with TestClient(main.app):
                pass
