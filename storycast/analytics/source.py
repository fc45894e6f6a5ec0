"""
Play Event Source

The read-only boundary the analytics engine pulls play events through.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Iterable, Protocol

from storycast.analytics.day_bucketer import bucket_events, sorted_buckets
from storycast.analytics.models import ActiveDay, PlayEvent, as_aware


class PlayEventSource(Protocol):
    def list_events(self, user_id: str, start: datetime, end: datetime) -> list[PlayEvent]:
        """Events for a user played within [start, end], in any order."""
        ...

    def list_active_days(self, user_id: str, tz: tzinfo) -> list[ActiveDay]:
        """Every local day the user has listened on, across all history."""
        ...

    def list_history(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        *,
        search_query: str | None = None,
        story_id: str | None = None,
        completed: bool | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[PlayEvent], int]:
        """A page of matching events, newest first, plus the total match count."""
        ...


class InMemoryPlayEventSource:
    """Play event source backed by a list, for tests and local tooling."""

    def __init__(self, events: Iterable[PlayEvent] = ()) -> None:
        self._events: list[PlayEvent] = list(events)

    def add(self, event: PlayEvent) -> None:
        self._events.append(event)

    def _for_user(self, user_id: str) -> list[PlayEvent]:
        return [event for event in self._events if event.user_id == user_id]

    def list_events(self, user_id: str, start: datetime, end: datetime) -> list[PlayEvent]:
        start = as_aware(start)
        end = as_aware(end)
        return [
            event
            for event in self._for_user(user_id)
            if start <= as_aware(event.played_at) <= end
        ]

    def list_active_days(self, user_id: str, tz: tzinfo) -> list[ActiveDay]:
        buckets = bucket_events(self._for_user(user_id), tz)
        return [ActiveDay(date=bucket.date, count=bucket.count) for bucket in sorted_buckets(buckets)]

    def list_history(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        *,
        search_query: str | None = None,
        story_id: str | None = None,
        completed: bool | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[PlayEvent], int]:
        matches = self.list_events(user_id, start, end)
        if story_id:
            matches = [event for event in matches if event.story_id == story_id]
        if completed is not None:
            matches = [event for event in matches if event.completed == completed]
        if search_query and search_query.strip():
            needle = search_query.strip().lower()
            matches = [event for event in matches if needle in event.story_title.lower()]
        matches.sort(key=lambda event: (as_aware(event.played_at), event.id), reverse=True)
        return matches[offset:offset + limit], len(matches)
