"""
Day Key Normalizer.

Every timestamp that enters the system is reduced to a *day key*: the local
calendar date as a fixed-width "YYYY-MM-DD" string. Streaks and calendars
only ever compare day keys, never raw timestamps, so a check-in at 23:00
and another at 01:00 the same local day are the same day.

Because the format is zero-padded and fixed-width, plain string comparison
of two keys agrees with chronological order.

Public API
----------
normalize(instant, tz)   -> DayKey
today(tz)                -> DayKey
parse(key)               -> date           (raises InvalidDayKeyError)
is_day_key(value)        -> bool
day_difference(a, b)     -> int            (signed, a - b)
add_days(key, n)         -> DayKey
window(end, size)        -> list[DayKey]   (oldest first, ends at `end`)

Pure functions; the clock is read only by today().
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.core.errors import InvalidDayKeyError

DayKey = str

_DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _local_zone(tz: Optional[tzinfo] = None) -> Optional[tzinfo]:
    """Explicit zone > configured TIMEZONE > None (host local)."""
    if tz is not None:
        return tz
    if settings.TIMEZONE:
        return ZoneInfo(settings.TIMEZONE)
    return None


def normalize(instant: Union[datetime, date], tz: Optional[tzinfo] = None) -> DayKey:
    """
    Map an instant to the day key of its local calendar date.

    Naive datetimes are already local wall time. Aware datetimes are
    converted to the local zone first. A bare `date` is its own day.
    """
    if isinstance(instant, datetime):
        if instant.tzinfo is not None:
            zone = _local_zone(tz)
            # astimezone(None) converts to the host's local zone
            instant = instant.astimezone(zone)
        local = instant.date()
    elif isinstance(instant, date):
        local = instant
    else:
        raise InvalidDayKeyError(instant)
    return f"{local.year:04d}-{local.month:02d}-{local.day:02d}"


def today(tz: Optional[tzinfo] = None) -> DayKey:
    return normalize(datetime.now(tz=timezone.utc), tz)


def parse(key: str) -> date:
    if not isinstance(key, str) or not _DAY_KEY_RE.match(key):
        raise InvalidDayKeyError(key)
    try:
        return date.fromisoformat(key)
    except ValueError:
        raise InvalidDayKeyError(key) from None


def is_day_key(value) -> bool:
    try:
        parse(value)
    except InvalidDayKeyError:
        return False
    return True


def _utc_midnight(key: DayKey) -> datetime:
    d = parse(key)
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)


def day_difference(a: DayKey, b: DayKey) -> int:
    """
    Signed number of days from `b` to `a` (positive when `a` is later).

    Both keys are pinned to UTC midnight, where every day is exactly
    86400 seconds long, so DST transitions cannot shift the count.
    """
    return (_utc_midnight(a) - _utc_midnight(b)).days


def add_days(key: DayKey, n: int) -> DayKey:
    return normalize(parse(key) + timedelta(days=n))


def window(end: DayKey, size: int) -> list[DayKey]:
    """`size` consecutive day keys ending at (and including) `end`."""
    if size < 1:
        raise ValueError(f"window size must be positive, got {size}")
    last = parse(end)
    return [normalize(last - timedelta(days=i)) for i in range(size - 1, -1, -1)]
