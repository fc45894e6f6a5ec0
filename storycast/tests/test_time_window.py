"""Tests for symbolic range resolution."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from storycast.analytics.errors import InvalidRangeError
from storycast.analytics.time_window import (
    ACTIVITY_RANGES,
    EPOCH,
    resolve_window,
    subtract_months,
)

NEW_YORK = ZoneInfo("America/New_York")


def test_day_range_starts_at_local_midnight():
    now = datetime(2024, 3, 15, 10, 30, tzinfo=NEW_YORK)
    window = resolve_window("7days", now)

    assert window.start_day == date(2024, 3, 8)
    assert window.end_day == date(2024, 3, 15)
    assert window.start == datetime(2024, 3, 8, tzinfo=NEW_YORK)
    assert window.end == now
    assert not window.open_start


def test_day_range_is_inclusive_at_day_granularity():
    now = datetime(2024, 3, 15, 10, 30, tzinfo=NEW_YORK)

    assert resolve_window("7days", now).count_days(None) == 8
    assert resolve_window("30days", now).count_days(None) == 31
    assert resolve_window("90days", now).count_days(None) == 91


def test_window_across_dst_keeps_local_midnight():
    """Mar 10 2024 is the US spring-forward date."""
    now = datetime(2024, 3, 15, 9, 0, tzinfo=NEW_YORK)
    window = resolve_window("7days", now)

    assert window.start.utcoffset() == timedelta(hours=-5)
    assert window.end.utcoffset() == timedelta(hours=-4)
    assert window.count_days(None) == 8


def test_month_ranges_clamp_to_month_length():
    assert subtract_months(date(2024, 8, 31), 6) == date(2024, 2, 29)
    assert subtract_months(date(2024, 2, 29), 12) == date(2023, 2, 28)
    assert subtract_months(date(2024, 1, 15), 1) == date(2023, 12, 15)

    window = resolve_window("6months", datetime(2024, 8, 31, 12, 0, tzinfo=NEW_YORK))
    assert window.start_day == date(2024, 2, 29)


def test_all_range_has_open_start():
    now = datetime(2024, 1, 3, 12, 0, tzinfo=ZoneInfo("UTC"))
    window = resolve_window("all", now)

    assert window.open_start
    assert window.start == EPOCH
    assert window.day_span(None) is None
    assert window.count_days(None) == 0
    assert window.day_span(date(2024, 1, 1)) == (date(2024, 1, 1), date(2024, 1, 3))
    assert window.count_days(date(2024, 1, 1)) == 3


def test_unknown_range_is_rejected():
    now = datetime(2024, 1, 3, 12, 0, tzinfo=NEW_YORK)

    with pytest.raises(InvalidRangeError) as excinfo:
        resolve_window("14days", now)
    assert excinfo.value.range_tag == "14days"


def test_month_ranges_are_calendar_only():
    now = datetime(2024, 1, 3, 12, 0, tzinfo=NEW_YORK)

    with pytest.raises(InvalidRangeError):
        resolve_window("6months", now, ACTIVITY_RANGES)
    with pytest.raises(InvalidRangeError):
        resolve_window("year", now, ACTIVITY_RANGES)
