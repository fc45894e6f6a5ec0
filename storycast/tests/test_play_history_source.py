"""Tests for the Postgres play history source that need no database."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone

import psycopg
import pytest

from storycast.analytics.errors import SourceUnavailableError
from storycast.db import migrate, play_history
from storycast.db.play_history import PostgresPlayEventSource


def test_row_mapping_derives_duration_and_cover():
    source = PostgresPlayEventSource(public_url="https://files.example.com/")
    played_at = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    row = (
        "9b1d", "user-1", "story-1", "The Brave Dragon", played_at,
        False, 25, 600, "en", "adventure", "covers/dragon.png",
    )
    event = source._row_to_event(row)

    assert event.duration_seconds == 150
    assert event.story_title == "The Brave Dragon"
    assert event.cover_image == (
        "https://files.example.com/storage/v1/object/public/covers/dragon.png"
    )
    assert event.language == "en"


def test_row_mapping_defaults():
    source = PostgresPlayEventSource()
    row = (
        "9b1d", "user-1", "story-1", None, datetime(2024, 1, 1, tzinfo=timezone.utc),
        True, 100, None, None, None, None,
    )
    event = source._row_to_event(row)

    assert event.story_title == "Unknown Story"
    assert event.duration_seconds == 0
    assert event.cover_image == source.placeholder_cover


def test_connection_failures_become_source_unavailable(monkeypatch):
    @contextmanager
    def failing_connection():
        raise psycopg.OperationalError("connection refused")
        yield

    monkeypatch.setattr(play_history, "get_connection", failing_connection)
    source = PostgresPlayEventSource()

    with pytest.raises(SourceUnavailableError):
        source.list_events("user-1", datetime(2024, 1, 1, tzinfo=timezone.utc), datetime.now(timezone.utc))
    with pytest.raises(SourceUnavailableError):
        source.list_active_days("user-1", timezone.utc)


def test_migrations_are_discovered():
    pending = migrate.pending_migrations(set())

    assert [path.name for path in pending] == ["001_play_history.sql"]
    assert migrate.pending_migrations({"001_play_history.sql"}) == []


class RecordingCursor:
    """Replays canned results and records every statement it runs."""

    def __init__(self, results):
        self.results = list(results)
        self.executed = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self.results.pop(0)

    def fetchall(self):
        return self.results.pop(0)


class RecordingConnection:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self):
        return self._cursor


def _use_cursor(monkeypatch, cursor):
    @contextmanager
    def fake_connection():
        yield RecordingConnection(cursor)

    monkeypatch.setattr(play_history, "get_connection", fake_connection)


def test_history_query_filters_and_pages(monkeypatch):
    played_at = datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc)
    row = (
        "9b1d", "user-1", "story-1", "A_b Tales", played_at,
        True, 100, 300, "en", "fable", None,
    )
    cursor = RecordingCursor([(7,), [row]])
    _use_cursor(monkeypatch, cursor)
    start = datetime(2023, 12, 4, tzinfo=timezone.utc)

    history, total = PostgresPlayEventSource().list_history(
        "user-1",
        start,
        played_at,
        search_query="  a_b ",
        story_id="story-1",
        completed=True,
        limit=5,
        offset=10,
    )

    assert total == 7
    assert [event.id for event in history] == ["9b1d"]
    assert history[0].duration_seconds == 300

    (count_sql, count_params), (page_sql, page_params) = cursor.executed
    expected = ["user-1", start, played_at, "story-1", True, "%a\\_b%"]
    assert count_sql.startswith("SELECT COUNT(*)")
    assert count_params == expected
    assert (
        "WHERE ph.user_id = %s AND ph.played_at >= %s AND ph.played_at <= %s "
        "AND ph.story_id::text = %s AND ph.completed = %s AND s.title ILIKE %s"
    ) in page_sql
    assert "ORDER BY ph.played_at DESC, ph.id DESC LIMIT %s OFFSET %s" in page_sql
    assert page_params == [*expected, 5, 10]


def test_history_query_without_filters(monkeypatch):
    cursor = RecordingCursor([(0,), []])
    _use_cursor(monkeypatch, cursor)
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2024, 1, 3, tzinfo=timezone.utc)

    history, total = PostgresPlayEventSource().list_history("user-1", start, end, search_query="   ")

    assert (history, total) == ([], 0)
    count_sql, count_params = cursor.executed[0]
    assert "ILIKE" not in count_sql
    assert count_params == ["user-1", start, end]
    assert cursor.executed[1][1] == ["user-1", start, end, 20, 0]


def test_like_wildcards_are_escaped():
    assert play_history._escape_like("100%_done\\") == "100\\%\\_done\\\\"


def test_history_connection_failure_becomes_source_unavailable(monkeypatch):
    @contextmanager
    def failing_connection():
        raise psycopg.OperationalError("connection refused")
        yield

    monkeypatch.setattr(play_history, "get_connection", failing_connection)

    with pytest.raises(SourceUnavailableError):
        PostgresPlayEventSource().list_history(
            "user-1",
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 3, tzinfo=timezone.utc),
        )
