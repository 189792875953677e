"""
Unit tests for the Day Key Normalizer. No DB.
"""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from app.core.config import settings
from app.core.errors import InvalidDayKeyError
from app.services import day_keys

NEW_YORK = ZoneInfo("America/New_York")


class TestNormalize:
    def test_late_night_and_early_morning_same_local_day(self):
        late = day_keys.normalize(datetime(2026, 3, 10, 23, 0))
        early = day_keys.normalize(datetime(2026, 3, 10, 1, 0))
        assert late == early == "2026-03-10"

    def test_zero_padded(self):
        assert day_keys.normalize(date(2026, 1, 5)) == "2026-01-05"

    def test_date_maps_to_itself(self):
        assert day_keys.normalize(date(2026, 12, 31)) == "2026-12-31"

    def test_aware_instant_uses_local_not_utc_date(self):
        # 02:00 UTC on the 11th is still the evening of the 10th in New York
        instant = datetime(2026, 3, 11, 2, 0, tzinfo=timezone.utc)
        assert day_keys.normalize(instant, NEW_YORK) == "2026-03-10"

    def test_configured_timezone(self, monkeypatch):
        monkeypatch.setattr(settings, "TIMEZONE", "Asia/Tokyo")
        instant = datetime(2026, 3, 10, 20, 0, tzinfo=timezone.utc)
        assert day_keys.normalize(instant) == "2026-03-11"

    def test_explicit_zone_beats_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "TIMEZONE", "Asia/Tokyo")
        instant = datetime(2026, 3, 10, 20, 0, tzinfo=timezone.utc)
        assert day_keys.normalize(instant, NEW_YORK) == "2026-03-10"

    def test_today_is_a_valid_key(self):
        assert day_keys.is_day_key(day_keys.today())

    def test_non_temporal_input_rejected(self):
        with pytest.raises(InvalidDayKeyError):
            day_keys.normalize("2026-03-10")


class TestParse:
    def test_valid(self):
        assert day_keys.parse("2026-02-28") == date(2026, 2, 28)

    @pytest.mark.parametrize("bad", ["2026-1-5", "2026-02-30", "not-a-date", "", "20260310", None, 20260310])
    def test_invalid(self, bad):
        with pytest.raises(InvalidDayKeyError):
            day_keys.parse(bad)
        assert day_keys.is_day_key(bad) is False


class TestDayDifference:
    def test_same_day(self):
        assert day_keys.day_difference("2026-03-10", "2026-03-10") == 0

    def test_signed(self):
        assert day_keys.day_difference("2026-03-12", "2026-03-10") == 2
        assert day_keys.day_difference("2026-03-10", "2026-03-12") == -2

    def test_across_spring_forward(self):
        # US clocks jump forward on 2026-03-08
        assert day_keys.day_difference("2026-03-09", "2026-03-07") == 2

    def test_across_fall_back(self):
        # US clocks fall back on 2026-11-01
        assert day_keys.day_difference("2026-11-02", "2026-10-31") == 2

    def test_across_year_and_leap_day(self):
        assert day_keys.day_difference("2029-01-01", "2028-12-31") == 1
        assert day_keys.day_difference("2028-03-01", "2028-02-28") == 2


class TestWindow:
    def test_add_days(self):
        assert day_keys.add_days("2026-02-27", 2) == "2026-03-01"
        assert day_keys.add_days("2026-01-01", -1) == "2025-12-31"

    def test_window_oldest_first_ending_today(self):
        days = day_keys.window("2026-03-02", 4)
        assert days == ["2026-02-27", "2026-02-28", "2026-03-01", "2026-03-02"]

    def test_window_of_one(self):
        assert day_keys.window("2026-03-02", 1) == ["2026-03-02"]

    def test_window_must_be_positive(self):
        with pytest.raises(ValueError):
            day_keys.window("2026-03-02", 0)

    def test_string_order_is_chronological(self):
        days = day_keys.window("2027-01-03", 400)
        assert days == sorted(days)
