"""Shared builders for the analytics tests."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone

from storycast.analytics.models import PlayEvent

_ids = itertools.count(1)


def make_event(
    played_at: datetime,
    story_id: str = "story-1",
    user_id: str = "user-1",
    duration_seconds: int = 60,
    completed: bool = False,
    story_title: str | None = None,
) -> PlayEvent:
    if played_at.tzinfo is None:
        played_at = played_at.replace(tzinfo=timezone.utc)
    return PlayEvent(
        id=f"play-{next(_ids)}",
        user_id=user_id,
        story_id=story_id,
        story_title=story_title or f"Title of {story_id}",
        played_at=played_at,
        completed=completed,
        progress_percentage=100 if completed else 50,
        duration_seconds=duration_seconds,
    )

