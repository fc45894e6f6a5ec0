"""
Streak Calculator

Consecutive-day listening streaks over the full history of active days.
Every streak figure the dashboard shows comes from here.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

from storycast.analytics.models import StreakInfo, StreakSummary

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def current_streak(active_days: set[date], today: date) -> int:
    """
    Length of the streak that is still alive on ``today``.

    A streak survives until the end of the day after its last play, so if
    today has no activity the walk starts from yesterday instead.
    """
    if today in active_days:
        day = today
    elif today - ONE_DAY in active_days:
        day = today - ONE_DAY
    else:
        return 0

    streak = 0
    while day in active_days:
        streak += 1
        day -= ONE_DAY
    return streak


def longest_streak(active_days: Iterable[date]) -> int:
    """Longest run of consecutive days, in one ascending pass."""
    longest = 0
    running = 0
    previous: date | None = None
    for day in sorted(set(active_days)):
        if previous is not None and day == previous + ONE_DAY:
            running += 1
        else:
            running = 1
        longest = max(longest, running)
        previous = day
    return longest


def calculate_streaks(active_days: Iterable[date], today: date) -> StreakInfo:
    days = set(active_days)
    if not days:
        return StreakInfo()
    info = StreakInfo(current=current_streak(days, today), longest=longest_streak(days))
    logger.debug(
        "Streaks over %d active days: current=%d longest=%d",
        len(days),
        info.current,
        info.longest,
    )
    return info


def recent_activity(active_days: Iterable[date], today: date, days: int = 7) -> list[bool]:
    """Whether each of the last ``days`` days had a play, oldest first."""
    active = set(active_days)
    return [today - timedelta(days=offset) in active for offset in range(days - 1, -1, -1)]


def summarize_streak(
    active_days: Iterable[date],
    today: date,
    history_days: int = 7,
) -> StreakSummary:
    days = set(active_days)
    info = calculate_streaks(days, today)
    past_days = [day for day in days if day <= today]
    return StreakSummary(
        current_streak=info.current,
        longest_streak=info.longest,
        last_listened_date=max(past_days) if past_days else None,
        streak_history=recent_activity(days, today, history_days),
    )
