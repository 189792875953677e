"""
Streak Engine: per-habit streak state transitions.

State carried per habit
-----------------------
  current_streak      consecutive checked-in days ending today or yesterday
  best_streak         historical maximum of current_streak
  last_check_in_date  day key of the most recent check-in, or None

Rules
-----
  1. EVALUATE
     diff = day_difference(today, last_check_in_date)
     diff <= 1  → streak alive, unchanged
     diff >  1  → at least one full day skipped: needs_reset, streak 0
     No last check-in → streak 0, nothing to reset.

  2. CHECK-IN
     A day already checked in is a no-op (one event per habit per day).
     Otherwise a stale streak collapses to 0 first, then
       current_streak += 1
       best_streak     = max(best_streak, current_streak)
       last_check_in_date = today

  3. RECONCILE
     Evaluate every habit against today and return a corrected snapshot.
     Inputs are never mutated; the caller writes the snapshot back.

Works on any object exposing the three state attributes (ORM Habit or
StreakState). No SQLAlchemy, no HTTP, stdlib-only.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional

from app.services.day_keys import DayKey, day_difference


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StreakState:
    """Plain snapshot of a habit's streak fields."""
    habit_id: Any
    current_streak: int = 0
    best_streak: int = 0
    last_check_in_date: Optional[DayKey] = None

    @classmethod
    def of(cls, habit) -> "StreakState":
        if isinstance(habit, StreakState):
            return habit
        return cls(
            habit_id=getattr(habit, "id", None),
            current_streak=habit.current_streak or 0,
            best_streak=habit.best_streak or 0,
            last_check_in_date=habit.last_check_in_date,
        )


@dataclass(frozen=True)
class StreakEvaluation:
    streak: int
    needs_reset: bool


@dataclass(frozen=True)
class CheckInOutcome:
    applied: bool           # False when the day was already checked in
    was_reset: bool         # True if a stale streak collapsed before counting
    current_streak: int
    best_streak: int


@dataclass
class Reconciliation:
    """Corrected snapshot produced by one reconciliation pass."""
    reference_day: DayKey
    states: list[StreakState] = field(default_factory=list)
    reset_ids: list[Any] = field(default_factory=list)

    @property
    def evaluated(self) -> int:
        return len(self.states)


# ---------------------------------------------------------------------------
# Rule 1: evaluate
# ---------------------------------------------------------------------------

def evaluate_for_today(habit, today: DayKey) -> StreakEvaluation:
    if not habit.last_check_in_date:
        return StreakEvaluation(streak=0, needs_reset=False)

    diff = day_difference(today, habit.last_check_in_date)
    if diff > 1:
        return StreakEvaluation(streak=0, needs_reset=True)
    return StreakEvaluation(streak=habit.current_streak or 0, needs_reset=False)


# ---------------------------------------------------------------------------
# Rule 2: check-in
# ---------------------------------------------------------------------------

def check_in(habit, today: DayKey, already_checked_in: bool = False) -> CheckInOutcome:
    """
    Apply today's check-in to `habit` in place.

    `already_checked_in` tells the engine an event for today exists; the
    call then changes nothing. A matching last_check_in_date is treated
    the same way.
    """
    if already_checked_in or habit.last_check_in_date == today:
        return CheckInOutcome(
            applied=False,
            was_reset=False,
            current_streak=habit.current_streak or 0,
            best_streak=habit.best_streak or 0,
        )

    evaluation = evaluate_for_today(habit, today)
    current = (0 if evaluation.needs_reset else evaluation.streak) + 1

    habit.current_streak = current
    habit.best_streak = max(habit.best_streak or 0, current)
    habit.last_check_in_date = today

    return CheckInOutcome(
        applied=True,
        was_reset=evaluation.needs_reset,
        current_streak=habit.current_streak,
        best_streak=habit.best_streak,
    )


# ---------------------------------------------------------------------------
# Rule 3: reconcile
# ---------------------------------------------------------------------------

def reconcile(habits: Iterable, today: DayKey) -> Reconciliation:
    """Evaluate every habit against `today`; return corrected states."""
    result = Reconciliation(reference_day=today)
    for habit in habits:
        state = StreakState.of(habit)
        evaluation = evaluate_for_today(state, today)
        if evaluation.needs_reset and state.current_streak != 0:
            state = replace(state, current_streak=0)
            result.reset_ids.append(state.habit_id)
        result.states.append(state)
    return result
