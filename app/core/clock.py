"""
Clock dependency. Routers receive "today" as a day key through this
function so tests can pin the date with `app.dependency_overrides`.
"""
from app.services import day_keys


def get_today() -> day_keys.DayKey:
    return day_keys.today()
