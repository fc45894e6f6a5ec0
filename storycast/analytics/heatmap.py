"""
Calendar Aggregator

Day-level heatmap data. Intensity levels are computed here so every view
shades days the same way.
"""

from __future__ import annotations

from storycast.analytics.models import CalendarData, CalendarDay, DayBucket

# Upper bounds of count/max_count for levels 1-3; anything above is level 4.
INTENSITY_THRESHOLDS = (0.25, 0.5, 0.75)


def intensity_level(count: int, max_count: int) -> int:
    if count <= 0:
        return 0
    ratio = count / max(1, max_count)
    for level, threshold in enumerate(INTENSITY_THRESHOLDS, start=1):
        if ratio <= threshold:
            return level
    return len(INTENSITY_THRESHOLDS) + 1


def build_calendar(days: list[DayBucket]) -> CalendarData:
    """Build heatmap data from zero-filled, ascending day buckets."""
    max_count = max([bucket.count for bucket in days] + [1])
    return CalendarData(
        days=[
            CalendarDay(
                date=bucket.date,
                count=bucket.count,
                duration_seconds=bucket.duration_seconds,
                level=intensity_level(bucket.count, max_count),
            )
            for bucket in days
        ],
        max_count=max_count,
    )
