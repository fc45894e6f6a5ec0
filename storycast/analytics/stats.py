"""
Stats Aggregator

Totals for the listening statistics card.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from storycast.analytics.models import (
    ListeningStats,
    MostPlayedStory,
    PlayEvent,
    StreakInfo,
    as_aware,
)

logger = logging.getLogger(__name__)


def most_played_story(events: Iterable[PlayEvent]) -> MostPlayedStory | None:
    """
    Story with the most plays.

    Ties go to the story played most recently, then to the larger story id.
    """
    groups: dict[str, list[PlayEvent]] = {}
    for event in events:
        groups.setdefault(event.story_id, []).append(event)
    if not groups:
        return None

    def rank(item: tuple[str, list[PlayEvent]]) -> tuple[int, datetime, str]:
        story_id, plays = item
        latest = max(as_aware(play.played_at) for play in plays)
        return len(plays), latest, story_id

    story_id, plays = max(groups.items(), key=rank)
    latest_play = max(plays, key=lambda play: as_aware(play.played_at))
    return MostPlayedStory(
        id=story_id,
        title=latest_play.story_title,
        cover_image=latest_play.cover_image,
        play_count=len(plays),
    )


def compute_stats(
    events: list[PlayEvent],
    window_days: int,
    streak: StreakInfo | None = None,
) -> ListeningStats:
    """
    Aggregate listening statistics for a window.

    Args:
        events: Play events inside the window
        window_days: Calendar days the window spans
        streak: Streaks computed over the full history

    Returns:
        ListeningStats; empty input yields zeros and no most-played story
    """
    streak = streak or StreakInfo()
    total_plays = len(events)
    total_duration = sum(event.duration_seconds for event in events)
    average_per_day = round(total_plays / max(1, window_days), 2)

    stats = ListeningStats(
        total_plays=total_plays,
        total_duration=total_duration,
        average_per_day=average_per_day,
        most_played_story=most_played_story(events),
        current_streak=streak.current,
        longest_streak=streak.longest,
    )
    logger.debug(
        "Stats: %d plays, %ds over %d days",
        total_plays,
        total_duration,
        window_days,
    )
    return stats
