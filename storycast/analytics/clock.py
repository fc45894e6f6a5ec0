"""Clock and timezone provider threaded through the analytics engine."""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo


class Clock:
    """Reports "now" in the user's local timezone."""

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """A clock pinned to a single instant."""

    def __init__(self, instant: datetime, tz: tzinfo | None = None) -> None:
        if tz is None:
            tz = instant.tzinfo or timezone.utc
        super().__init__(tz)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=tz)
        self._instant = instant.astimezone(tz)

    def now(self) -> datetime:
        return self._instant
