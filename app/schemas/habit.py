"""
Habit request / response schemas.

POST /habits                          → HabitCreateRequest → HabitResponse
GET  /habits                          → HabitListResponse
POST /habits/{id}/check-in            → CheckInResponse
GET  /habits/{id}/calendar            → CalendarResponse
GET  /habits/{id}/calendar/month      → MonthCalendarResponse
GET  /habits/{id}/check-ins           → CheckInListResponse
POST /habits/reconcile                → ReconcileResponse
"""
from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TARGET_DAYS_MAX = 365


class HabitCreateRequest(BaseModel):
    """A new chain to start tracking."""
    name: Annotated[str, Field(
        min_length=1,
        max_length=120,
        description="Display label. Stripped of leading/trailing whitespace.",
        examples=["Read 10 pages", "No sugar"],
    )]
    target_days: int = Field(
        default=21,
        ge=1,
        le=TARGET_DAYS_MAX,
        description="Goal length in consecutive days.",
        examples=[7, 21, 66, 90],
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: str) -> str:
        stripped = v.strip() if isinstance(v, str) else v
        if not stripped:
            raise ValueError("name must not be empty after stripping whitespace")
        return stripped


class HabitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    target_days: int
    current_streak: int
    best_streak: int
    last_check_in_date: Optional[str] = Field(
        default=None, description="Day key of the latest check-in, or null."
    )
    is_active: bool
    created_at: str = Field(description="Day key of the day the habit was created.")
    checked_in_today: bool
    progress_percent: float = Field(description="current_streak / target_days, capped at 100.")
    days_remaining: int
    target_date: str = Field(description="Day the target is reached if no day is missed.")


class HabitListResponse(BaseModel):
    total: int
    items: list[HabitResponse]


class CheckInResponse(BaseModel):
    """Result of a check-in. `applied` is false when the day was already checked in."""
    habit_id: int
    day: str
    applied: bool
    streak_restarted: bool = Field(
        description="True if a broken streak collapsed to 0 before this check-in counted."
    )
    current_streak: int
    best_streak: int


class CheckInOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    day: str
    status: str


class CheckInListResponse(BaseModel):
    habit_id: int
    total: int
    items: list[CheckInOut]


class DayCellResponse(BaseModel):
    day: str
    status: str = Field(
        description='"completed" | "missed" | "pending-today" | "not-yet-started" | "out-of-range"'
    )
    is_today: bool


class CalendarResponse(BaseModel):
    habit_id: int
    today: str
    window: int
    days: list[DayCellResponse] = Field(description="Oldest first; the last cell is today.")
    summary: dict[str, int] = Field(description="Cell count per status.")


class MonthCalendarResponse(BaseModel):
    habit_id: int
    year: int
    month: int
    leading_blanks: int = Field(description="Empty cells before the 1st (Sunday-first grid).")
    days: list[DayCellResponse]
    summary: dict[str, int]


class ReconcileResponse(BaseModel):
    reference_day: str
    evaluated: int
    reset_habit_ids: list[int]
