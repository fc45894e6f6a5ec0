"""
Listening Analytics Engine

Pure functions turning play events into stats, calendar heatmaps, streaks and
listening patterns.
"""

from storycast.analytics.clock import Clock, FixedClock
from storycast.analytics.day_bucketer import bucket_events, fill_days, iter_days, local_day
from storycast.analytics.errors import AnalyticsError, InvalidRangeError, SourceUnavailableError
from storycast.analytics.heatmap import build_calendar, intensity_level
from storycast.analytics.models import (
    ActiveDay,
    CalendarData,
    CalendarDay,
    DashboardData,
    DayBucket,
    ListeningPatterns,
    ListeningStats,
    MostPlayedStory,
    PlayEvent,
    PlayHistoryPage,
    StreakInfo,
    StreakSummary,
    TimeWindow,
)
from storycast.analytics.patterns import WEEKDAYS, analyze_patterns
from storycast.analytics.source import InMemoryPlayEventSource, PlayEventSource
from storycast.analytics.stats import compute_stats, most_played_story
from storycast.analytics.streaks import calculate_streaks, recent_activity, summarize_streak
from storycast.analytics.time_window import ACTIVITY_RANGES, CALENDAR_RANGES, resolve_window

__all__ = [
    "ACTIVITY_RANGES",
    "CALENDAR_RANGES",
    "WEEKDAYS",
    "ActiveDay",
    "AnalyticsError",
    "CalendarData",
    "CalendarDay",
    "Clock",
    "DashboardData",
    "DayBucket",
    "FixedClock",
    "InMemoryPlayEventSource",
    "InvalidRangeError",
    "ListeningPatterns",
    "ListeningStats",
    "MostPlayedStory",
    "PlayEvent",
    "PlayEventSource",
    "PlayHistoryPage",
    "SourceUnavailableError",
    "StreakInfo",
    "StreakSummary",
    "TimeWindow",
    "analyze_patterns",
    "bucket_events",
    "build_calendar",
    "calculate_streaks",
    "compute_stats",
    "fill_days",
    "intensity_level",
    "iter_days",
    "local_day",
    "most_played_story",
    "recent_activity",
    "resolve_window",
    "summarize_streak",
]
