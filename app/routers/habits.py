"""
Habits router.

POST   /habits                       start a new chain
GET    /habits                       all chains (reconciled, newest first)
POST   /habits/reconcile             run the streak reconciliation pass
GET    /habits/{id}                  one chain (reconciled)
DELETE /habits/{id}                  delete a chain and its check-ins
POST   /habits/{id}/check-in         check in for today (idempotent)
GET    /habits/{id}/check-ins        check-in log, oldest first
GET    /habits/{id}/calendar         last N days, classified
GET    /habits/{id}/calendar/month   one calendar month, classified
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.clock import get_today
from app.db.base import get_db
from app.models.habit import Habit
from app.schemas.common import HABIT_NOT_FOUND, VALIDATION_FAILED
from app.schemas.habit import (
    CalendarResponse,
    CheckInListResponse,
    CheckInOut,
    CheckInResponse,
    DayCellResponse,
    HabitCreateRequest,
    HabitListResponse,
    HabitResponse,
    MonthCalendarResponse,
    ReconcileResponse,
)
from app.services import habits as habit_service
from app.services.calendar import DayCell, summarize

router = APIRouter(prefix="/habits", tags=["habits"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _habit_to_response(habit: Habit, today: str) -> HabitResponse:
    p = habit_service.progress(habit, today)
    return HabitResponse(
        id=habit.id,
        name=habit.name,
        target_days=habit.target_days,
        current_streak=habit.current_streak,
        best_streak=habit.best_streak,
        last_check_in_date=habit.last_check_in_date,
        is_active=habit.is_active,
        created_at=habit.created_at,
        checked_in_today=p.checked_in_today,
        progress_percent=p.progress_percent,
        days_remaining=p.days_remaining,
        target_date=p.target_date,
    )


def _cell_to_response(cell: DayCell) -> DayCellResponse:
    return DayCellResponse(day=cell.day, status=cell.status.value, is_today=cell.is_today)


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=HabitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a new chain",
    responses=VALIDATION_FAILED,
)
def create_habit(
    payload: HabitCreateRequest,
    db: Session = Depends(get_db),
    today: str = Depends(get_today),
):
    """Create a habit with empty streaks. `created_at` is today's day key."""
    habit = habit_service.create_habit(db, payload.name, payload.target_days, today)
    return _habit_to_response(habit, today)


@router.get(
    "",
    response_model=HabitListResponse,
    summary="List chains (newest first)",
)
def list_habits(db: Session = Depends(get_db), today: str = Depends(get_today)):
    """
    Streaks are re-derived from today before they are returned: a chain
    whose last check-in is more than one day old comes back with
    `current_streak == 0`, and that reset is persisted.
    """
    items = habit_service.list_habits(db, today)
    return HabitListResponse(
        total=len(items),
        items=[_habit_to_response(h, today) for h in items],
    )


@router.post(
    "/reconcile",
    response_model=ReconcileResponse,
    summary="Reset every broken streak",
)
def reconcile(db: Session = Depends(get_db), today: str = Depends(get_today)):
    """Idempotent: a second call on the same day resets nothing."""
    result = habit_service.reconcile_streaks(db, today)
    return ReconcileResponse(
        reference_day=result.reference_day,
        evaluated=result.evaluated,
        reset_habit_ids=result.reset_ids,
    )


# ---------------------------------------------------------------------------
# Single habit
# ---------------------------------------------------------------------------

@router.get(
    "/{habit_id}",
    response_model=HabitResponse,
    summary="Get one chain",
    responses=HABIT_NOT_FOUND,
)
def get_habit(habit_id: int, db: Session = Depends(get_db), today: str = Depends(get_today)):
    habit = habit_service.load_habit(db, habit_id, today)
    return _habit_to_response(habit, today)


@router.delete(
    "/{habit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a chain and its check-ins",
    responses=HABIT_NOT_FOUND,
)
def delete_habit(habit_id: int, db: Session = Depends(get_db)):
    habit_service.delete_habit(db, habit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{habit_id}/check-in",
    response_model=CheckInResponse,
    summary="Check in for today",
    responses=HABIT_NOT_FOUND,
)
def check_in(habit_id: int, db: Session = Depends(get_db), today: str = Depends(get_today)):
    """
    Record today's check-in.

    - First check-in of the day: `current_streak` += 1 (restarting from 0 if
      the chain was broken) and `best_streak` follows it upward.
    - Repeated check-in the same day: nothing changes, `applied` is false.
    """
    result = habit_service.check_in_habit(db, habit_id, today)
    return CheckInResponse(
        habit_id=result.habit.id,
        day=result.day,
        applied=result.outcome.applied,
        streak_restarted=result.outcome.was_reset,
        current_streak=result.outcome.current_streak,
        best_streak=result.outcome.best_streak,
    )


@router.get(
    "/{habit_id}/check-ins",
    response_model=CheckInListResponse,
    summary="Check-in log (oldest first)",
    responses=HABIT_NOT_FOUND,
)
def list_check_ins(habit_id: int, db: Session = Depends(get_db)):
    items = habit_service.list_check_ins(db, habit_id)
    return CheckInListResponse(
        habit_id=habit_id,
        total=len(items),
        items=[CheckInOut.model_validate(c) for c in items],
    )


@router.get(
    "/{habit_id}/calendar",
    response_model=CalendarResponse,
    summary="Classified lookback window ending today",
    responses={**HABIT_NOT_FOUND, **VALIDATION_FAILED},
)
def calendar_window(
    habit_id: int,
    window: Optional[int] = Query(
        default=None,
        description="Number of days, including today. Defaults to 7.",
        examples=[7, 30],
    ),
    db: Session = Depends(get_db),
    today: str = Depends(get_today),
):
    """
    Exactly `window` cells, oldest first. Per day:

    | Status | When |
    |---|---|
    | `completed`       | a check-in exists |
    | `pending-today`   | today, not yet checked in |
    | `not-yet-started` | before the chain was created |
    | `missed`          | any other past day |
    """
    habit, cells = habit_service.get_calendar(db, habit_id, today, window)
    return CalendarResponse(
        habit_id=habit.id,
        today=today,
        window=len(cells),
        days=[_cell_to_response(c) for c in cells],
        summary=summarize(cells),
    )


@router.get(
    "/{habit_id}/calendar/month",
    response_model=MonthCalendarResponse,
    summary="Classified calendar month",
    responses={**HABIT_NOT_FOUND, **VALIDATION_FAILED},
)
def calendar_month(
    habit_id: int,
    year: Optional[int] = Query(default=None, ge=1970, le=9999, description="Defaults to this year."),
    month: Optional[int] = Query(default=None, ge=1, le=12, description="Defaults to this month."),
    db: Session = Depends(get_db),
    today: str = Depends(get_today),
):
    """Every day of the month; days after today are `out-of-range`."""
    habit, view = habit_service.get_month(db, habit_id, today, year, month)
    return MonthCalendarResponse(
        habit_id=habit.id,
        year=view.year,
        month=view.month,
        leading_blanks=view.leading_blanks,
        days=[_cell_to_response(c) for c in view.cells],
        summary=summarize(view.cells),
    )
