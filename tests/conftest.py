"""
Shared pytest fixtures.

Uses a throwaway SQLite file so no server database is required, and a
settable clock so every test controls what "today" is.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///./test_chains.db"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.core.clock import get_today
from app.db.base import Base, engine, get_db
from app.main import app
from app.models.check_in import CheckIn
from app.models.habit import Habit
from app.models.weight_entry import WeightEntry
from app.services import day_keys

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_TODAY = "2026-03-10"


class FakeClock:
    """Stands in for get_today(); `advance()` moves to a later day."""

    def __init__(self, today: str = DEFAULT_TODAY):
        self.today = today

    def __call__(self) -> str:
        return self.today

    def advance(self, days: int = 1) -> str:
        self.today = day_keys.add_days(self.today, days)
        return self.today


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    db = TestingSessionLocal()
    try:
        db.query(CheckIn).delete()
        db.query(Habit).delete()
        db.query(WeightEntry).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def client(clock):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = clock
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
