from __future__ import annotations

from typing import Iterable


class AnalyticsError(Exception):
    """Base class for listening analytics failures."""


class InvalidRangeError(AnalyticsError, ValueError):
    """Raised when a symbolic range tag is not recognized."""

    def __init__(self, range_tag: str, allowed: Iterable[str]) -> None:
        self.range_tag = range_tag
        self.allowed = tuple(allowed)
        super().__init__(
            f"Invalid range {range_tag!r}. Must be one of: {', '.join(self.allowed)}"
        )


class SourceUnavailableError(AnalyticsError):
    """Raised when the play event source cannot be reached."""
