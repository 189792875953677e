"""
Habit service: binds the pure streak/calendar core to the database.

Rules:
- Every read of habit state is preceded by a reconciliation pass, so a
  stale alive streak is never returned after a missed day.
- Check-ins are an explicit upsert keyed by (habit_id, day); the second
  check-in of a day changes nothing.
- db.commit() only at the public functions; failed commits roll back and
  raise PersistenceError.

Public API
----------
create_habit(db, name, target_days, today)        -> Habit
get_habit(db, habit_id)                           -> Habit
load_habit(db, habit_id, today)                   -> Habit   (reconciled)
list_habits(db, today)                            -> list[Habit]
delete_habit(db, habit_id)                        -> None
reconcile_streaks(db, today)                      -> Reconciliation
check_in_habit(db, habit_id, today)               -> CheckInResult
list_check_ins(db, habit_id)                      -> list[CheckIn]
get_calendar(db, habit_id, today, window)         -> tuple[Habit, list[DayCell]]
get_month(db, habit_id, today, year, month)       -> tuple[Habit, MonthCalendar]
progress(habit, today)                            -> HabitProgress
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import HabitNotFoundError, InvalidWindowError, PersistenceError
from app.models.check_in import CheckIn
from app.models.habit import Habit
from app.services import calendar, day_keys, streak_engine
from app.services.calendar import DayCell, MonthCalendar
from app.services.day_keys import DayKey
from app.services.streak_engine import CheckInOutcome, Reconciliation

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class CheckInResult:
    habit: Habit
    outcome: CheckInOutcome
    day: DayKey


@dataclass(frozen=True)
class HabitProgress:
    progress_percent: float
    days_remaining: int
    target_date: DayKey
    checked_in_today: bool


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _commit(db: Session, operation: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Commit failed during %s: %s", operation, exc)
        raise PersistenceError(operation) from exc


def _has_check_in(db: Session, habit_id: int, day: DayKey) -> bool:
    return (
        db.query(CheckIn.id)
        .filter(CheckIn.habit_id == habit_id, CheckIn.day == day)
        .first()
        is not None
    )


def progress(habit: Habit, today: DayKey) -> HabitProgress:
    """Progress toward target_days, as shown on a habit card."""
    current = habit.current_streak or 0
    percent = min(current / habit.target_days * 100, 100.0)
    remaining = max(habit.target_days - current, 0)
    return HabitProgress(
        progress_percent=round(percent, 1),
        days_remaining=remaining,
        target_date=day_keys.add_days(today, remaining),
        checked_in_today=habit.last_check_in_date == today,
    )


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------

def reconcile_streaks(db: Session, today: DayKey) -> Reconciliation:
    """
    Re-derive every habit's streak from `today` and write resets back
    immediately. Idempotent: a second pass on the same day finds nothing.
    """
    habits = db.query(Habit).all()
    result = streak_engine.reconcile(habits, today)
    if not result.reset_ids:
        return result

    by_id = {h.id: h for h in habits}
    for state in result.states:
        if state.habit_id in result.reset_ids:
            by_id[state.habit_id].current_streak = state.current_streak
    _commit(db, "reconcile")
    logger.info(
        "Reset %d broken streak(s) on %s: %s",
        len(result.reset_ids), today, result.reset_ids,
    )
    return result


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

def create_habit(db: Session, name: str, target_days: int, today: DayKey) -> Habit:
    habit = Habit(
        name=name,
        target_days=target_days,
        current_streak=0,
        best_streak=0,
        last_check_in_date=None,
        is_active=True,
        created_at=today,
    )
    db.add(habit)
    _commit(db, "create_habit")
    db.refresh(habit)
    logger.info("Created habit %s (%r, target %d days)", habit.id, habit.name, habit.target_days)
    return habit


def get_habit(db: Session, habit_id: int) -> Habit:
    habit: Optional[Habit] = db.get(Habit, habit_id)
    if habit is None:
        raise HabitNotFoundError(habit_id)
    return habit


def load_habit(db: Session, habit_id: int, today: DayKey) -> Habit:
    """Single habit with its streak reconciled against today."""
    habit = get_habit(db, habit_id)
    reconcile_streaks(db, today)
    return habit


def list_habits(db: Session, today: DayKey) -> list[Habit]:
    """All habits, newest first, after reconciling against today."""
    reconcile_streaks(db, today)
    return db.query(Habit).order_by(Habit.id.desc()).all()


def delete_habit(db: Session, habit_id: int) -> None:
    habit = get_habit(db, habit_id)
    db.delete(habit)
    _commit(db, "delete_habit")
    logger.info("Deleted habit %s and its check-ins", habit_id)


def list_check_ins(db: Session, habit_id: int) -> list[CheckIn]:
    get_habit(db, habit_id)
    return (
        db.query(CheckIn)
        .filter(CheckIn.habit_id == habit_id)
        .order_by(CheckIn.day.asc())
        .all()
    )


# ---------------------------------------------------------------------------
# Check-in
# ---------------------------------------------------------------------------

def check_in_habit(db: Session, habit_id: int, today: DayKey) -> CheckInResult:
    """
    Record today's check-in. At most one CheckIn per (habit, day): a
    repeated call returns applied=False and leaves the streak alone.
    """
    habit = get_habit(db, habit_id)
    already = _has_check_in(db, habit.id, today)
    outcome = streak_engine.check_in(habit, today, already_checked_in=already)

    if not outcome.applied:
        logger.debug("Habit %s already checked in on %s", habit.id, today)
        return CheckInResult(habit=habit, outcome=outcome, day=today)

    db.add(CheckIn(habit_id=habit.id, day=today, status="completed"))
    try:
        db.commit()
    except IntegrityError:
        # Another request inserted the same (habit, day) first
        db.rollback()
        db.refresh(habit)
        outcome = CheckInOutcome(
            applied=False,
            was_reset=False,
            current_streak=habit.current_streak,
            best_streak=habit.best_streak,
        )
        return CheckInResult(habit=habit, outcome=outcome, day=today)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Commit failed during check_in: %s", exc)
        raise PersistenceError("check_in") from exc

    db.refresh(habit)
    if outcome.was_reset:
        logger.info("Habit %s streak restarted on %s", habit.id, today)
    return CheckInResult(habit=habit, outcome=outcome, day=today)


# ---------------------------------------------------------------------------
# Calendar views
# ---------------------------------------------------------------------------

def get_calendar(
    db: Session,
    habit_id: int,
    today: DayKey,
    window: Optional[int] = None,
) -> tuple[Habit, list[DayCell]]:
    size = settings.CALENDAR_DEFAULT_WINDOW if window is None else window
    if size < 1 or size > settings.CALENDAR_MAX_WINDOW:
        raise InvalidWindowError(size, settings.CALENDAR_MAX_WINDOW)

    habit = get_habit(db, habit_id)
    start = day_keys.add_days(today, -(size - 1))
    events = (
        db.query(CheckIn.day)
        .filter(CheckIn.habit_id == habit.id, CheckIn.day >= start, CheckIn.day <= today)
        .all()
    )
    cells = calendar.reconstruct(habit, [row.day for row in events], today, size)
    return habit, cells


def get_month(
    db: Session,
    habit_id: int,
    today: DayKey,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> tuple[Habit, MonthCalendar]:
    current = day_keys.parse(today)
    year = year or current.year
    month = month or current.month

    habit = get_habit(db, habit_id)
    prefix = f"{year:04d}-{month:02d}-"
    events = (
        db.query(CheckIn.day)
        .filter(CheckIn.habit_id == habit.id, CheckIn.day.startswith(prefix))
        .all()
    )
    month_view = calendar.reconstruct_month(habit, [row.day for row in events], today, year, month)
    return habit, month_view
