"""
Play History Source

Postgres-backed play event source. Reads only; recording plays belongs to the
player.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, tzinfo
from typing import Any, Iterator

import psycopg
from psycopg_pool import PoolTimeout

from storycast.analytics.day_bucketer import local_day
from storycast.analytics.errors import SourceUnavailableError
from storycast.analytics.models import (
    PLACEHOLDER_COVER,
    ActiveDay,
    PlayEvent,
    derive_duration_seconds,
)
from storycast.db.connection import get_connection

logger = logging.getLogger(__name__)

_EVENT_COLUMNS = """
    ph.id,
    ph.user_id,
    ph.story_id,
    s.title,
    ph.played_at,
    ph.completed,
    ph.progress_percentage,
    s.duration,
    s.language,
    s.theme,
    (
        SELECT si.storage_path
        FROM story_images si
        WHERE si.story_id = ph.story_id
        ORDER BY si.position, si.id
        LIMIT 1
    ) AS storage_path
"""


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@contextmanager
def _source_errors(operation: str) -> Iterator[None]:
    """Surface connection failures as SourceUnavailableError."""
    try:
        yield
    except (PoolTimeout, psycopg.OperationalError) as exc:
        logger.warning("Play history source unavailable during %s: %s", operation, exc)
        raise SourceUnavailableError(f"Play history unavailable: {exc}") from exc


class PostgresPlayEventSource:
    """Reads play events from the ``play_history`` table."""

    def __init__(self, public_url: str = "", placeholder_cover: str = PLACEHOLDER_COVER) -> None:
        self.public_url = public_url.rstrip("/")
        self.placeholder_cover = placeholder_cover

    def _cover_image(self, storage_path: str | None) -> str:
        if not storage_path or not self.public_url:
            return self.placeholder_cover
        return f"{self.public_url}/storage/v1/object/public/{storage_path}"

    def _row_to_event(self, row: tuple[Any, ...]) -> PlayEvent:
        completed = bool(row[5])
        progress = int(row[6] or 0)
        return PlayEvent(
            id=str(row[0]),
            user_id=row[1],
            story_id=str(row[2]),
            story_title=row[3] or "Unknown Story",
            played_at=row[4],
            completed=completed,
            progress_percentage=progress,
            duration_seconds=derive_duration_seconds(row[7], completed, progress),
            language=row[8],
            theme=row[9],
            cover_image=self._cover_image(row[10]),
        )

    def list_events(self, user_id: str, start: datetime, end: datetime) -> list[PlayEvent]:
        with _source_errors("list_events"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        f"""
                        SELECT {_EVENT_COLUMNS}
                        FROM play_history ph
                        LEFT JOIN stories s ON s.id = ph.story_id
                        WHERE ph.user_id = %s
                        AND ph.played_at >= %s AND ph.played_at <= %s
                        """,
                        (user_id, start, end),
                    )
                    rows = cur.fetchall()

        return [self._row_to_event(row) for row in rows]

    def list_active_days(self, user_id: str, tz: tzinfo) -> list[ActiveDay]:
        """
        Local days with plays, across the user's whole history.

        Instants are bucketed here rather than in SQL so day boundaries match
        the engine's bucketer exactly.
        """
        with _source_errors("list_active_days"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "SELECT played_at FROM play_history WHERE user_id = %s",
                        (user_id,),
                    )
                    rows = cur.fetchall()

        counts: dict[date, int] = {}
        for (played_at,) in rows:
            day = local_day(played_at, tz)
            counts[day] = counts.get(day, 0) + 1
        return [ActiveDay(date=day, count=counts[day]) for day in sorted(counts)]

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
        conditions = ["ph.user_id = %s", "ph.played_at >= %s", "ph.played_at <= %s"]
        params: list[Any] = [user_id, start, end]
        if story_id:
            conditions.append("ph.story_id::text = %s")
            params.append(story_id)
        if completed is not None:
            conditions.append("ph.completed = %s")
            params.append(completed)
        if search_query and search_query.strip():
            conditions.append("s.title ILIKE %s")
            params.append(f"%{_escape_like(search_query.strip())}%")
        where = " AND ".join(conditions)

        with _source_errors("list_history"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        f"""
                        SELECT COUNT(*)
                        FROM play_history ph
                        LEFT JOIN stories s ON s.id = ph.story_id
                        WHERE {where}
                        """,
                        params,
                    )
                    total = cur.fetchone()[0]

                    cur.execute(
                        f"""
                        SELECT {_EVENT_COLUMNS}
                        FROM play_history ph
                        LEFT JOIN stories s ON s.id = ph.story_id
                        WHERE {where}
                        ORDER BY ph.played_at DESC, ph.id DESC
                        LIMIT %s OFFSET %s
                        """,
                        [*params, limit, offset],
                    )
                    rows = cur.fetchall()

        return [self._row_to_event(row) for row in rows], total or 0
