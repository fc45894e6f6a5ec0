from __future__ import annotations

import sys
from pathlib import Path

from storycast.db.connection import get_admin_connection

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _ensure_migrations_table(conn) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version TEXT PRIMARY KEY,
                applied_at TIMESTAMPTZ DEFAULT NOW()
            )
            """
        )
    conn.commit()


def _applied_migrations(conn) -> set[str]:
    with conn.cursor() as cur:
        cur.execute("SELECT version FROM schema_migrations")
        return {row[0] for row in cur.fetchall()}


def _apply_migration(conn, version: str, sql: str) -> None:
    with conn.cursor() as cur:
        cur.execute(sql)
        cur.execute(
            "INSERT INTO schema_migrations (version) VALUES (%s)",
            (version,),
        )
    conn.commit()


def pending_migrations(applied: set[str]) -> list[Path]:
    return [
        migration
        for migration in sorted(MIGRATIONS_DIR.glob("*.sql"))
        if migration.name not in applied
    ]


def main() -> int:
    if not any(MIGRATIONS_DIR.glob("*.sql")):
        print("No migration files found.", file=sys.stderr)
        return 1

    with get_admin_connection() as conn:
        _ensure_migrations_table(conn)
        applied = _applied_migrations(conn)

        for migration in pending_migrations(applied):
            print(f"Applying {migration.name}...")
            _apply_migration(conn, migration.name, migration.read_text(encoding="utf-8"))

    print("Migrations complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
