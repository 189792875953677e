"""
Weight log service: one body-weight entry per calendar day.

Writes are upserts keyed by day: logging twice on the same day keeps only
the latest value.

Public API
----------
upsert_weight(db, weight, day, today)    -> tuple[WeightEntry, bool]   (entry, created)
list_weights(db, limit, offset)          -> tuple[int, list[WeightEntry]]
latest_weight(db)                        -> Optional[WeightEntry]
weekly_history(db, today)                -> list[WeightDay]
trend(db, today, days)                   -> WeightTrend
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import FutureDayError, PersistenceError
from app.models.weight_entry import WeightEntry
from app.services import day_keys
from app.services.day_keys import DayKey

logger = logging.getLogger(__name__)

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WeightDay:
    day: DayKey
    weekday: str
    has_entry: bool
    is_today: bool


@dataclass
class WeightTrend:
    since: DayKey
    until: DayKey
    points: list[WeightEntry] = field(default_factory=list)
    minimum: Optional[Decimal] = None
    maximum: Optional[Decimal] = None
    change: Optional[Decimal] = None    # last - first


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def _find(db: Session, day: DayKey) -> Optional[WeightEntry]:
    return db.query(WeightEntry).filter(WeightEntry.day == day).first()


def upsert_weight(
    db: Session, weight: Decimal, day: DayKey, today: Optional[DayKey] = None
) -> tuple[WeightEntry, bool]:
    """
    Insert or overwrite the entry for `day`. Returns (entry, created).

    With `today` given, days after it are rejected: a future entry would
    shadow the real latest weight.
    """
    if today is not None and day > today:
        raise FutureDayError(day, today)

    entry = _find(db, day)
    created = entry is None
    if created:
        entry = WeightEntry(day=day, weight=weight)
        db.add(entry)
    else:
        logger.debug("Overwriting weight for %s: %s -> %s", day, entry.weight, weight)
        entry.weight = weight

    try:
        db.commit()
    except IntegrityError:
        # Lost an insert race for the same day: overwrite the winner instead
        db.rollback()
        entry = _find(db, day)
        entry.weight = weight
        created = False
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("upsert_weight") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Commit failed during upsert_weight: %s", exc)
        raise PersistenceError("upsert_weight") from exc

    db.refresh(entry)
    return entry, created


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def list_weights(db: Session, limit: int = 50, offset: int = 0) -> tuple[int, list[WeightEntry]]:
    """Return (total, page) ordered by day desc."""
    q = db.query(WeightEntry)
    total = q.count()
    items = q.order_by(WeightEntry.day.desc()).offset(offset).limit(limit).all()
    return total, items


def latest_weight(db: Session) -> Optional[WeightEntry]:
    return db.query(WeightEntry).order_by(WeightEntry.day.desc()).first()


def weekly_history(db: Session, today: DayKey) -> list[WeightDay]:
    """Seven days ending today, oldest first, flagging days with an entry."""
    days = day_keys.window(today, 7)
    logged = {
        row.day
        for row in db.query(WeightEntry.day).filter(
            WeightEntry.day >= days[0], WeightEntry.day <= today
        ).all()
    }
    return [
        WeightDay(
            day=d,
            weekday=_WEEKDAYS[day_keys.parse(d).weekday()],
            has_entry=d in logged,
            is_today=d == today,
        )
        for d in days
    ]


def trend(db: Session, today: DayKey, days: Optional[int] = None) -> WeightTrend:
    """Entries from the last `days` days, oldest first, with min/max/change."""
    lookback = settings.WEIGHT_TREND_DAYS if days is None else days
    since = day_keys.add_days(today, -lookback)
    points = (
        db.query(WeightEntry)
        .filter(WeightEntry.day >= since, WeightEntry.day <= today)
        .order_by(WeightEntry.day.asc())
        .all()
    )
    result = WeightTrend(since=since, until=today, points=points)
    if points:
        weights = [p.weight for p in points]
        result.minimum = min(weights)
        result.maximum = max(weights)
        result.change = weights[-1] - weights[0]
    return result
