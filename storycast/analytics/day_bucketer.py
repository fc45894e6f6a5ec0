"""
Day Bucketer

Groups play events into local calendar days. Every contiguous view (calendar,
window day counts) goes through ``fill_days``; sparse views use the raw map.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Iterator

from storycast.analytics.models import DayBucket, PlayEvent, as_aware

logger = logging.getLogger(__name__)


def local_day(instant: datetime, tz: tzinfo) -> date:
    """Calendar day of an instant in the user's timezone."""
    return as_aware(instant).astimezone(tz).date()


def bucket_events(events: Iterable[PlayEvent], tz: tzinfo) -> dict[date, DayBucket]:
    """Collapse events into one bucket per local day that has activity."""
    buckets: dict[date, DayBucket] = {}
    for event in events:
        day = local_day(event.played_at, tz)
        bucket = buckets.get(day)
        if bucket is None:
            bucket = buckets[day] = DayBucket(date=day)
        bucket.add(event)
    return buckets


def iter_days(start_day: date, end_day: date) -> Iterator[date]:
    """Yield each calendar day from start to end, inclusive."""
    day = start_day
    while day <= end_day:
        yield day
        day += timedelta(days=1)


def fill_days(
    buckets: dict[date, DayBucket],
    start_day: date,
    end_day: date,
) -> list[DayBucket]:
    """
    Contiguous, ascending buckets for a day range.

    Days without activity are synthesized with zero counts. Buckets outside
    the range are ignored.
    """
    filled = [buckets.get(day) or DayBucket(date=day) for day in iter_days(start_day, end_day)]
    logger.debug(
        "Filled %d days (%s..%s) from %d active buckets",
        len(filled),
        start_day,
        end_day,
        len(buckets),
    )
    return filled


def sorted_buckets(buckets: dict[date, DayBucket]) -> list[DayBucket]:
    """Sparse buckets in chronological order."""
    return [buckets[day] for day in sorted(buckets)]


def first_day(buckets: dict[date, DayBucket]) -> date | None:
    return min(buckets) if buckets else None
