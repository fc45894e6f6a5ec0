"""Tests for calendar heatmap aggregation."""

from datetime import date

from storycast.analytics.heatmap import build_calendar, intensity_level
from storycast.analytics.models import DayBucket


def test_intensity_thresholds():
    assert intensity_level(0, 4) == 0
    assert intensity_level(1, 4) == 1
    assert intensity_level(2, 4) == 2
    assert intensity_level(3, 4) == 3
    assert intensity_level(4, 4) == 4
    assert intensity_level(3, 8) == 2
    assert intensity_level(1, 0) == 4


def test_calendar_levels_and_max_count():
    days = [
        DayBucket(date=date(2024, 1, 1), count=2, duration_seconds=120),
        DayBucket(date=date(2024, 1, 2)),
        DayBucket(date=date(2024, 1, 3), count=1, duration_seconds=30),
    ]
    calendar = build_calendar(days)

    assert calendar.max_count == 2
    assert [day.count for day in calendar.days] == [2, 0, 1]
    assert [day.level for day in calendar.days] == [4, 0, 2]
    assert calendar.to_dict()["days"][0] == {
        "date": "2024-01-01",
        "count": 2,
        "durationSeconds": 120,
        "level": 4,
    }


def test_empty_window():
    calendar = build_calendar([])

    assert calendar.days == []
    assert calendar.max_count == 1


def test_all_zero_days_keep_max_count_at_one():
    days = [DayBucket(date=date(2024, 1, d)) for d in (1, 2)]
    calendar = build_calendar(days)

    assert calendar.max_count == 1
    assert [day.level for day in calendar.days] == [0, 0]
