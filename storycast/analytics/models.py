"""
Listening Analytics Models

Play events as read from the source, and the derived views computed from them.
Derived views render the dashboard's camelCase contract through ``to_dict``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

PLACEHOLDER_COVER = "https://via.placeholder.com/300x300?text=No+Image"


def derive_duration_seconds(
    story_duration: int | float | None,
    completed: bool,
    progress_percentage: int | None,
) -> int:
    """
    Listening time one session contributes.

    A completed session counts the whole story; otherwise the story duration
    is scaled by the progress percentage.
    """
    if not story_duration:
        return 0
    if completed:
        return int(round(story_duration))
    progress = max(0, min(100, progress_percentage or 0))
    return int(round(story_duration * progress / 100))


def as_aware(instant: datetime) -> datetime:
    """Read naive datetimes as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


@dataclass(frozen=True)
class PlayEvent:
    """One listening session record."""

    id: str
    user_id: str
    story_id: str
    played_at: datetime
    story_title: str = "Unknown Story"
    cover_image: str = PLACEHOLDER_COVER
    completed: bool = False
    progress_percentage: int = 0
    duration_seconds: int = 0
    language: str | None = None
    theme: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "storyId": self.story_id,
            "storyTitle": self.story_title,
            "coverImage": self.cover_image,
            "playedAt": as_aware(self.played_at).isoformat(),
            "duration": self.duration_seconds,
            "completed": self.completed,
            "progress": self.progress_percentage,
            "language": self.language,
            "theme": self.theme,
        }


@dataclass(frozen=True)
class ActiveDay:
    """A local calendar day with at least one play."""

    date: date
    count: int


@dataclass
class DayBucket:
    """Play events collapsed into a single local calendar day."""

    date: date
    count: int = 0
    duration_seconds: int = 0
    completed_count: int = 0

    def add(self, event: PlayEvent) -> None:
        self.count += 1
        self.duration_seconds += event.duration_seconds
        if event.completed:
            self.completed_count += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "count": self.count,
            "durationSeconds": self.duration_seconds,
            "completedCount": self.completed_count,
        }


@dataclass(frozen=True)
class TimeWindow:
    """A symbolic range resolved to concrete instants and local days."""

    range_tag: str
    start: datetime
    end: datetime
    start_day: date
    end_day: date
    open_start: bool = False

    def day_span(self, first_active_day: date | None) -> tuple[date, date] | None:
        """
        Days the window covers once an open start is clamped to real activity.

        Returns None when an open-start window has no activity to anchor on.
        """
        if not self.open_start:
            return self.start_day, self.end_day
        if first_active_day is None:
            return None
        start_day = max(self.start_day, first_active_day)
        if start_day > self.end_day:
            return None
        return start_day, self.end_day

    def count_days(self, first_active_day: date | None) -> int:
        span = self.day_span(first_active_day)
        if span is None:
            return 0
        return (span[1] - span[0]).days + 1


@dataclass(frozen=True)
class StreakInfo:
    current: int = 0
    longest: int = 0


@dataclass(frozen=True)
class StreakSummary:
    """Streak figures plus the recent-days strip shown beside them."""

    current_streak: int = 0
    longest_streak: int = 0
    last_listened_date: date | None = None
    streak_history: list[bool] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "lastListenedDate": (
                self.last_listened_date.isoformat() if self.last_listened_date else None
            ),
            "streakHistory": list(self.streak_history),
        }


@dataclass(frozen=True)
class CalendarDay:
    date: date
    count: int
    duration_seconds: int
    level: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "count": self.count,
            "durationSeconds": self.duration_seconds,
            "level": self.level,
        }


@dataclass(frozen=True)
class CalendarData:
    days: list[CalendarDay] = field(default_factory=list)
    max_count: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "days": [day.to_dict() for day in self.days],
            "maxCount": self.max_count,
        }


@dataclass(frozen=True)
class MostPlayedStory:
    id: str
    title: str
    cover_image: str
    play_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "coverImage": self.cover_image,
            "playCount": self.play_count,
        }


@dataclass(frozen=True)
class ListeningStats:
    total_plays: int = 0
    total_duration: int = 0
    average_per_day: float = 0.0
    most_played_story: MostPlayedStory | None = None
    current_streak: int = 0
    longest_streak: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalPlays": self.total_plays,
            "totalDuration": self.total_duration,
            "averagePerDay": self.average_per_day,
            "mostPlayedStory": (
                self.most_played_story.to_dict() if self.most_played_story else None
            ),
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
        }


@dataclass(frozen=True)
class ListeningPatterns:
    hourly_distribution: list[tuple[int, int]] = field(default_factory=list)
    weekday_distribution: list[tuple[str, int]] = field(default_factory=list)
    peak_hour: int | None = None
    peak_day: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "hourlyDistribution": [
                {"hour": hour, "count": count} for hour, count in self.hourly_distribution
            ],
            "weekdayDistribution": [
                {"day": day, "count": count} for day, count in self.weekday_distribution
            ],
            "peakHour": self.peak_hour,
            "peakDay": self.peak_day,
        }


@dataclass(frozen=True)
class PlayHistoryPage:
    history: list[PlayEvent] = field(default_factory=list)
    count: int = 0
    page: int = 1
    page_size: int = 20

    def to_dict(self) -> dict[str, Any]:
        return {
            "history": [entry.to_dict() for entry in self.history],
            "count": self.count,
            "page": self.page,
            "pageSize": self.page_size,
        }


@dataclass(frozen=True)
class DashboardData:
    """Everything one dashboard view load renders."""

    stats: ListeningStats
    calendar: CalendarData
    patterns: ListeningPatterns
    streak: StreakSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "calendar": self.calendar.to_dict(),
            "patterns": self.patterns.to_dict(),
            "streak": self.streak.to_dict(),
        }
