"""
Pattern Analyzer

Hour-of-day and day-of-week histograms over raw play events.
"""

from __future__ import annotations

from datetime import tzinfo
from typing import Iterable

from storycast.analytics.models import ListeningPatterns, PlayEvent, as_aware

# Monday first, indexed by datetime.weekday().
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def analyze_patterns(events: Iterable[PlayEvent], tz: tzinfo) -> ListeningPatterns:
    """
    Count plays per local hour and per local weekday.

    Both histograms are always complete (24 hours, 7 weekdays). Peaks are
    None when there are no plays; ties go to the earlier hour or weekday.
    """
    hours = [0] * 24
    weekdays = [0] * 7
    for event in events:
        local = as_aware(event.played_at).astimezone(tz)
        hours[local.hour] += 1
        weekdays[local.weekday()] += 1

    peak_hour = None
    peak_day = None
    if any(hours):
        peak_hour = hours.index(max(hours))
        peak_day = WEEKDAYS[weekdays.index(max(weekdays))]

    return ListeningPatterns(
        hourly_distribution=list(enumerate(hours)),
        weekday_distribution=list(zip(WEEKDAYS, weekdays)),
        peak_hour=peak_hour,
        peak_day=peak_day,
    )
