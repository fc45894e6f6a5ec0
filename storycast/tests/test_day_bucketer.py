"""Tests for local-day bucketing and zero filling."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from storycast.analytics.day_bucketer import (
    bucket_events,
    fill_days,
    first_day,
    local_day,
    sorted_buckets,
)
from storycast.tests.helpers import make_event

LOS_ANGELES = ZoneInfo("America/Los_Angeles")


def test_same_day_events_collapse_into_one_bucket():
    events = [
        make_event(datetime(2024, 1, 1, 8, 0), duration_seconds=60),
        make_event(datetime(2024, 1, 1, 20, 0), duration_seconds=120, completed=True),
        make_event(datetime(2024, 1, 2, 9, 0), duration_seconds=30),
    ]
    buckets = bucket_events(events, timezone.utc)

    assert set(buckets) == {date(2024, 1, 1), date(2024, 1, 2)}
    first = buckets[date(2024, 1, 1)]
    assert first.count == 2
    assert first.duration_seconds == 180
    assert first.completed_count == 1


def test_buckets_use_local_day_not_utc_day():
    event = make_event(datetime(2024, 1, 2, 3, 0, tzinfo=timezone.utc))

    assert local_day(event.played_at, LOS_ANGELES) == date(2024, 1, 1)
    assert list(bucket_events([event], LOS_ANGELES)) == [date(2024, 1, 1)]


def test_naive_instants_read_as_utc():
    assert local_day(datetime(2024, 1, 2, 3, 0), LOS_ANGELES) == date(2024, 1, 1)


def test_fill_days_zero_fills_gaps():
    events = [
        make_event(datetime(2024, 1, 2, 12, 0)),
        make_event(datetime(2024, 1, 4, 12, 0)),
        make_event(datetime(2024, 1, 4, 13, 0)),
    ]
    buckets = bucket_events(events, timezone.utc)
    filled = fill_days(buckets, date(2024, 1, 1), date(2024, 1, 5))

    assert [bucket.date for bucket in filled] == [date(2024, 1, d) for d in range(1, 6)]
    assert [bucket.count for bucket in filled] == [0, 1, 0, 2, 0]


def test_fill_days_ignores_buckets_outside_range():
    buckets = bucket_events([make_event(datetime(2023, 12, 31, 12, 0))], timezone.utc)
    filled = fill_days(buckets, date(2024, 1, 1), date(2024, 1, 2))

    assert [bucket.count for bucket in filled] == [0, 0]


def test_fill_days_across_dst_transition():
    filled = fill_days({}, date(2024, 3, 9), date(2024, 3, 11))

    assert [bucket.date for bucket in filled] == [
        date(2024, 3, 9),
        date(2024, 3, 10),
        date(2024, 3, 11),
    ]


def test_empty_range_and_sparse_helpers():
    assert fill_days({}, date(2024, 1, 2), date(2024, 1, 1)) == []
    assert first_day({}) is None

    buckets = bucket_events(
        [make_event(datetime(2024, 1, 3, 12, 0)), make_event(datetime(2024, 1, 1, 12, 0))],
        timezone.utc,
    )
    assert first_day(buckets) == date(2024, 1, 1)
    assert [bucket.date for bucket in sorted_buckets(buckets)] == [
        date(2024, 1, 1),
        date(2024, 1, 3),
    ]
