"""
Listening History API Routes

Endpoints for the history dashboard: stats, play history, calendar heatmap,
listening patterns and streaks.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import APIRouter, HTTPException, Query, Request

from storycast.analytics.errors import InvalidRangeError, SourceUnavailableError
from storycast.services.history_service import get_history_service

router = APIRouter()
logger = logging.getLogger(__name__)

USER_HEADER = "x-user-id"


def _user_id(request: Request) -> str | None:
    """Identity set by the authenticating gateway; None for anonymous callers."""
    user_id = request.headers.get(USER_HEADER, "").strip()
    return user_id or None


def _respond(label: str, call: Callable[[], Any]) -> Any:
    try:
        return call()
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SourceUnavailableError as e:
        logger.warning("Play history unavailable for %s: %s", label, e)
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception("Failed to get %s", label)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/stats")
def get_stats(
    request: Request,
    range_tag: str = Query("30days", alias="range", description="Time range: 7days, 30days, 90days, or all"),
) -> dict[str, Any]:
    """
    Get listening statistics.

    Returns total plays, listening time, plays per day, most played story and streaks.
    """
    service = get_history_service()
    user_id = _user_id(request)
    return _respond("listening stats", lambda: service.get_listening_stats(user_id, range_tag).to_dict())


@router.get("/plays")
def get_plays(
    request: Request,
    range_tag: str = Query("30days", alias="range", description="Time range: 7days, 30days, 90days, or all"),
    q: str | None = Query(None, description="Search story titles"),
    story_id: str | None = Query(None, description="Only plays of this story"),
    completed: bool | None = Query(None, description="Filter by completion"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int | None = Query(None, ge=1, le=100, description="Items per page"),
) -> dict[str, Any]:
    """
    Get paginated play history, newest first.
    """
    service = get_history_service()
    user_id = _user_id(request)
    return _respond(
        "play history",
        lambda: service.get_play_history(
            user_id,
            range_tag,
            search_query=q,
            story_id=story_id,
            completed=completed,
            page=page,
            page_size=page_size,
        ).to_dict(),
    )


@router.get("/calendar")
def get_calendar(
    request: Request,
    range_tag: str = Query("year", alias="range", description="Time range: 6months, year, all, or a day range"),
) -> dict[str, Any]:
    """
    Get calendar heatmap data.

    Returns one entry per day in the range with play count and intensity level.
    """
    service = get_history_service()
    user_id = _user_id(request)
    return _respond("calendar data", lambda: service.get_calendar_data(user_id, range_tag).to_dict())


@router.get("/patterns")
def get_patterns(
    request: Request,
    range_tag: str = Query("30days", alias="range", description="Time range: 7days, 30days, 90days, or all"),
) -> dict[str, Any]:
    """
    Get listening patterns by hour of day and day of week.
    """
    service = get_history_service()
    user_id = _user_id(request)
    return _respond(
        "listening patterns", lambda: service.get_listening_patterns(user_id, range_tag).to_dict()
    )


@router.get("/streak")
def get_streak(request: Request) -> dict[str, Any]:
    """
    Get current and longest listening streaks with the last 7 days of activity.
    """
    service = get_history_service()
    user_id = _user_id(request)
    return _respond("listening streak", lambda: service.get_listening_streak(user_id).to_dict())


@router.get("/daily")
def get_daily(
    request: Request,
    range_tag: str = Query("30days", alias="range", description="Time range: 7days, 30days, 90days, or all"),
) -> dict[str, Any]:
    """
    Get days with listening activity, oldest first.
    """
    service = get_history_service()
    user_id = _user_id(request)

    def build() -> dict[str, Any]:
        days = service.get_daily_activity(user_id, range_tag)
        return {"range": range_tag, "days": [bucket.to_dict() for bucket in days]}

    return _respond("daily activity", build)


@router.get("/dashboard")
def get_dashboard(
    request: Request,
    range_tag: str = Query("30days", alias="range", description="Time range for stats and patterns"),
    calendar_range: str = Query("year", description="Time range for the calendar heatmap"),
) -> dict[str, Any]:
    """
    Get everything the history dashboard renders in one call.
    """
    service = get_history_service()
    user_id = _user_id(request)
    return _respond(
        "dashboard",
        lambda: service.get_dashboard(user_id, range_tag, calendar_range).to_dict(),
    )
