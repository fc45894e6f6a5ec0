"""
Time Window Resolver

Maps symbolic range tags to concrete instants anchored on the caller's "now".
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from storycast.analytics.errors import InvalidRangeError
from storycast.analytics.models import TimeWindow

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DAY_RANGES = {
    "7days": 7,
    "30days": 30,
    "90days": 90,
}

MONTH_RANGES = {
    "6months": 6,
    "year": 12,
}

ACTIVITY_RANGES = ("7days", "30days", "90days", "all")
CALENDAR_RANGES = ("7days", "30days", "90days", "6months", "year", "all")


def subtract_months(day: date, months: int) -> date:
    """Step back whole calendar months, clamping to the target month's length."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def resolve_window(
    range_tag: str,
    now: datetime,
    allowed: tuple[str, ...] = CALENDAR_RANGES,
) -> TimeWindow:
    """
    Resolve a symbolic range to a concrete window.

    Args:
        range_tag: One of the tags in ``allowed``
        now: Aware datetime in the user's local timezone
        allowed: Tags the caller accepts

    Returns:
        TimeWindow whose start is the local midnight of its first day

    Raises:
        InvalidRangeError: If the tag is unknown or not allowed
    """
    if range_tag not in allowed:
        raise InvalidRangeError(range_tag, allowed)

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    tz = now.tzinfo
    today = now.date()

    if range_tag in DAY_RANGES:
        start_day = today - timedelta(days=DAY_RANGES[range_tag])
    elif range_tag in MONTH_RANGES:
        start_day = subtract_months(today, MONTH_RANGES[range_tag])
    elif range_tag == "all":
        return TimeWindow(
            range_tag=range_tag,
            start=EPOCH,
            end=now,
            start_day=EPOCH.astimezone(tz).date(),
            end_day=today,
            open_start=True,
        )
    else:
        raise InvalidRangeError(range_tag, allowed)

    return TimeWindow(
        range_tag=range_tag,
        start=start_of_day(start_day, tz),
        end=now,
        start_day=start_day,
        end_day=today,
    )
