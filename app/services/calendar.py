"""
Calendar Reconstructor: day-by-day classification of a habit's history.

Classification of a day `d` (first match wins)
----------------------------------------------
  1. a check-in exists for d          → completed
  2. d is today                       → pending-today
  3. d is after today (month view)    → out-of-range
  4. d is before the habit's creation → not-yet-started
  5. otherwise                        → missed

Day keys are compared as strings; their fixed-width format makes that
chronological. Cells are rebuilt from scratch on every call and never
stored.

Public API
----------
reconstruct(habit, events, today, window_size)        -> list[DayCell]
reconstruct_month(habit, events, today, year, month)  -> MonthCalendar
summarize(cells)                                      -> dict[str, int]
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from app.services import day_keys
from app.services.day_keys import DayKey


class DayStatus(str, enum.Enum):
    completed = "completed"
    missed = "missed"
    pending_today = "pending-today"
    not_yet_started = "not-yet-started"
    out_of_range = "out-of-range"


@dataclass(frozen=True)
class DayCell:
    day: DayKey
    status: DayStatus
    is_today: bool


@dataclass(frozen=True)
class MonthCalendar:
    year: int
    month: int
    leading_blanks: int     # weekday of the 1st, Sunday = 0
    cells: list[DayCell]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _checked_days(events: Iterable) -> set[DayKey]:
    """Accept CheckIn rows (anything with `.day`) or bare day keys."""
    return {e if isinstance(e, str) else e.day for e in events}


def _classify(day: DayKey, checked: set[DayKey], created_at: DayKey, today: DayKey) -> DayStatus:
    if day in checked:
        return DayStatus.completed
    if day == today:
        return DayStatus.pending_today
    if day > today:
        return DayStatus.out_of_range
    if day < created_at:
        return DayStatus.not_yet_started
    return DayStatus.missed


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def reconstruct(habit, events: Iterable, today: DayKey, window_size: int) -> list[DayCell]:
    """
    Exactly `window_size` cells, oldest first, the last one being `today`.
    Days before the habit existed come out as not-yet-started.
    """
    checked = _checked_days(events)
    return [
        DayCell(day=d, status=_classify(d, checked, habit.created_at, today), is_today=(d == today))
        for d in day_keys.window(today, window_size)
    ]


def reconstruct_month(habit, events: Iterable, today: DayKey, year: int, month: int) -> MonthCalendar:
    first = date(year, month, 1)
    next_first = date(year + (month == 12), month % 12 + 1, 1)
    length = (next_first - first).days

    checked = _checked_days(events)
    cells = []
    for offset in range(length):
        d = day_keys.normalize(first + timedelta(days=offset))
        cells.append(DayCell(
            day=d,
            status=_classify(d, checked, habit.created_at, today),
            is_today=(d == today),
        ))

    return MonthCalendar(
        year=year,
        month=month,
        leading_blanks=(first.weekday() + 1) % 7,
        cells=cells,
    )


def summarize(cells: Iterable[DayCell]) -> dict[str, int]:
    counts = {status.value: 0 for status in DayStatus}
    for cell in cells:
        counts[cell.status.value] += 1
    return counts
