"""
History Service

Request-level entry points for the listening history dashboard. Each call pulls
play events from the source, resolves its window against the clock, and hands
the events to the pure analytics functions. Nothing is cached between calls.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime

from storycast.analytics.clock import Clock
from storycast.analytics.day_bucketer import bucket_events, fill_days, first_day, sorted_buckets
from storycast.analytics.heatmap import build_calendar
from storycast.analytics.models import (
    CalendarData,
    DashboardData,
    DayBucket,
    ListeningPatterns,
    ListeningStats,
    PlayEvent,
    PlayHistoryPage,
    StreakSummary,
    TimeWindow,
)
from storycast.analytics.patterns import analyze_patterns
from storycast.analytics.source import PlayEventSource
from storycast.analytics.stats import compute_stats
from storycast.analytics.streaks import calculate_streaks, summarize_streak
from storycast.analytics.time_window import ACTIVITY_RANGES, CALENDAR_RANGES, resolve_window
from storycast.app_settings import load_settings, resolve_int, resolve_storage, resolve_timezone

logger = logging.getLogger(__name__)


class HistoryService:
    """Computes the listening history views for one user at a time."""

    def __init__(
        self,
        source: PlayEventSource,
        clock: Clock | None = None,
        workers: int = 4,
        page_size: int = 20,
        streak_history_days: int = 7,
    ) -> None:
        self.source = source
        self.clock = clock or Clock()
        self.workers = max(1, workers)
        self.page_size = page_size
        self.streak_history_days = streak_history_days

    # Windows and raw data

    def _window(
        self,
        range_tag: str,
        allowed: tuple[str, ...],
        now: datetime | None = None,
    ) -> TimeWindow:
        return resolve_window(range_tag, now or self.clock.now(), allowed)

    def _events(self, user_id: str, window: TimeWindow) -> list[PlayEvent]:
        events = self.source.list_events(user_id, window.start, window.end)
        logger.debug(
            "Loaded %d events for %s (%s)", len(events), user_id, window.range_tag
        )
        return events

    def _active_days(self, user_id: str) -> list[date]:
        active = self.source.list_active_days(user_id, self.clock.tz)
        return [day.date for day in active if day.count > 0]

    # Pure computations over fetched data

    def _stats(
        self,
        events: list[PlayEvent],
        window: TimeWindow,
        active_days: list[date],
    ) -> ListeningStats:
        buckets = bucket_events(events, self.clock.tz)
        streak = calculate_streaks(active_days, window.end_day)
        return compute_stats(events, window.count_days(first_day(buckets)), streak)

    def _calendar(self, events: list[PlayEvent], window: TimeWindow) -> CalendarData:
        buckets = bucket_events(events, self.clock.tz)
        span = window.day_span(first_day(buckets))
        if span is None:
            return CalendarData()
        return build_calendar(fill_days(buckets, *span))

    def _patterns(self, events: list[PlayEvent]) -> ListeningPatterns:
        return analyze_patterns(events, self.clock.tz)

    def _streak(self, active_days: list[date], today: date) -> StreakSummary:
        return summarize_streak(active_days, today, self.streak_history_days)

    # Request functions

    def get_listening_stats(self, user_id: str | None, range_tag: str = "30days") -> ListeningStats:
        """
        Totals, averages, most-played story and streaks for a range.

        Streaks always consider the user's whole history, not just the range.
        """
        window = self._window(range_tag, ACTIVITY_RANGES)
        if not user_id:
            return ListeningStats()
        return self._stats(self._events(user_id, window), window, self._active_days(user_id))

    def get_play_history(
        self,
        user_id: str | None,
        range_tag: str = "30days",
        search_query: str | None = None,
        story_id: str | None = None,
        completed: bool | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> PlayHistoryPage:
        """Page through play history, newest first."""
        window = self._window(range_tag, ACTIVITY_RANGES)
        page = max(1, page)
        page_size = max(1, page_size or self.page_size)
        if not user_id:
            return PlayHistoryPage(page=page, page_size=page_size)

        history, count = self.source.list_history(
            user_id,
            window.start,
            window.end,
            search_query=search_query,
            story_id=story_id,
            completed=completed,
            limit=page_size,
            offset=(page - 1) * page_size,
        )
        return PlayHistoryPage(history=history, count=count, page=page, page_size=page_size)

    def get_calendar_data(self, user_id: str | None, range_tag: str = "year") -> CalendarData:
        """Zero-filled heatmap days for a range."""
        window = self._window(range_tag, CALENDAR_RANGES)
        if not user_id:
            return CalendarData()
        return self._calendar(self._events(user_id, window), window)

    def get_listening_patterns(
        self,
        user_id: str | None,
        range_tag: str = "30days",
    ) -> ListeningPatterns:
        """Hour-of-day and weekday histograms for a range."""
        window = self._window(range_tag, ACTIVITY_RANGES)
        if not user_id:
            return analyze_patterns([], self.clock.tz)
        return self._patterns(self._events(user_id, window))

    def get_listening_streak(self, user_id: str | None) -> StreakSummary:
        """Current and longest streak with the recent-days strip."""
        today = self.clock.today()
        if not user_id:
            return self._streak([], today)
        return self._streak(self._active_days(user_id), today)

    def get_daily_activity(self, user_id: str | None, range_tag: str = "30days") -> list[DayBucket]:
        """Days with plays in a range, oldest first."""
        window = self._window(range_tag, ACTIVITY_RANGES)
        if not user_id:
            return []
        return sorted_buckets(bucket_events(self._events(user_id, window), self.clock.tz))

    def get_dashboard(
        self,
        user_id: str | None,
        range_tag: str = "30days",
        calendar_range: str = "year",
    ) -> DashboardData:
        """
        Everything a dashboard load needs, computed concurrently.

        Events are fetched once per window; stats, calendar, patterns and
        streaks are then computed in parallel and joined. Both windows are
        resolved against a single reading of the clock.
        """
        now = self.clock.now()
        window = self._window(range_tag, ACTIVITY_RANGES, now)
        calendar_window = self._window(calendar_range, CALENDAR_RANGES, now)
        if not user_id:
            return DashboardData(
                stats=ListeningStats(),
                calendar=CalendarData(),
                patterns=analyze_patterns([], self.clock.tz),
                streak=self._streak([], window.end_day),
            )

        events = self._events(user_id, window)
        if calendar_window == window:
            calendar_events = events
        else:
            calendar_events = self._events(user_id, calendar_window)
        active_days = self._active_days(user_id)

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            stats_future = executor.submit(self._stats, events, window, active_days)
            calendar_future = executor.submit(self._calendar, calendar_events, calendar_window)
            patterns_future = executor.submit(self._patterns, events)
            streak_future = executor.submit(self._streak, active_days, window.end_day)

            return DashboardData(
                stats=stats_future.result(),
                calendar=calendar_future.result(),
                patterns=patterns_future.result(),
                streak=streak_future.result(),
            )


def build_history_service(source: PlayEventSource | None = None) -> HistoryService:
    """Wire a HistoryService from the stored settings."""
    settings = load_settings()
    if source is None:
        from storycast.db.play_history import PostgresPlayEventSource

        public_url, placeholder = resolve_storage(settings)
        source = PostgresPlayEventSource(public_url=public_url, placeholder_cover=placeholder)

    return HistoryService(
        source=source,
        clock=Clock(resolve_timezone(settings)),
        workers=resolve_int(settings, "workers", 4),
        page_size=resolve_int(settings, "history_page_size", 20),
        streak_history_days=resolve_int(settings, "streak_history_days", 7),
    )


# Singleton instance
_service: HistoryService | None = None


def get_history_service() -> HistoryService:
    """Get the singleton HistoryService instance."""
    global _service
    if _service is None:
        _service = build_history_service()
    return _service
