"""
Habit ("chain"): one row per tracked behavior.

Day columns hold canonical day keys (fixed-width "YYYY-MM-DD" strings) so
string comparison in SQL agrees with chronological order.

Invariants kept by app/services/streak_engine.py:
  best_streak >= current_streak
  current_streak == 0 whenever last_check_in_date is NULL
"""
from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Habit(Base):
    __tablename__ = "habits"
    __table_args__ = (
        CheckConstraint("target_days > 0", name="ck_habit_target_positive"),
        CheckConstraint("current_streak >= 0", name="ck_habit_streak_non_negative"),
        CheckConstraint("best_streak >= current_streak", name="ck_habit_best_ge_current"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    target_days: Mapped[int] = mapped_column(Integer, nullable=False)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    best_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_check_in_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[str] = mapped_column(
        String(10), nullable=False, index=True,
        comment="Day key of the day the habit was defined",
    )

    check_ins: Mapped[list["CheckIn"]] = relationship(  # noqa: F821
        back_populates="habit",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CheckIn.day",
    )
