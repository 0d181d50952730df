"""
Database adapter for the radio tables: SQLite by default, PostgreSQL on demand.

Uses the DATABASE_URL environment variable to pick the backend:
- "postgres://..." or "postgresql://..." -> PostgreSQL via psycopg2
- anything else (or unset) -> the local SQLite database
"""

import os
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Protocol

from loguru import logger


class CursorProtocol(Protocol):
    """Protocol for database cursor."""

    def fetchone(self) -> Optional[Any]: ...
    def fetchall(self) -> list[Any]: ...
    @property
    def rowcount(self) -> int: ...


class ConnectionProtocol(Protocol):
    """Protocol for database connection."""

    def execute(self, query: str, params: tuple = ()) -> CursorProtocol: ...
    def commit(self) -> None: ...
    def close(self) -> None: ...


def get_database_url() -> Optional[str]:
    """Get DATABASE_URL from environment."""
    return os.environ.get("DATABASE_URL")


def is_postgres() -> bool:
    """Check if using PostgreSQL."""
    url = get_database_url()
    return url is not None and url.startswith(("postgres://", "postgresql://"))


def _convert_query_placeholders(query: str) -> str:
    """Convert SQLite ? placeholders to PostgreSQL %s placeholders."""
    # Simple conversion - doesn't handle ? inside string literals
    return query.replace("?", "%s")


class PostgresCursor:
    """Wrapper around a psycopg2 cursor returning rows as dicts."""

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor
        self._columns: Optional[list[str]] = None

    def execute(self, query: str, params: tuple = ()) -> "PostgresCursor":
        self._cursor.execute(_convert_query_placeholders(query), params)
        if self._cursor.description:
            self._columns = [desc[0] for desc in self._cursor.description]
        return self

    def fetchone(self) -> Optional[dict[str, Any]]:
        row = self._cursor.fetchone()
        if row is None or self._columns is None:
            return None
        return dict(zip(self._columns, row))

    def fetchall(self) -> list[dict[str, Any]]:
        if not self._columns:
            return []
        return [dict(zip(self._columns, row)) for row in self._cursor.fetchall()]

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount


class PostgresConnection:
    """Wrapper around a psycopg2 connection matching the sqlite3 call style."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    def execute(self, query: str, params: tuple = ()) -> PostgresCursor:
        return PostgresCursor(self._conn.cursor()).execute(query, params)

    def commit(self) -> None:
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()


@contextmanager
def get_radio_db_connection() -> Iterator[ConnectionProtocol]:
    """
    Get a database connection for the radio tables.

    Uses DATABASE_URL if set (PostgreSQL), otherwise falls back to SQLite.
    """
    if is_postgres():
        import psycopg2

        logger.debug("Connecting to PostgreSQL")
        wrapped = PostgresConnection(psycopg2.connect(get_database_url()))
        try:
            yield wrapped
        finally:
            wrapped.close()
    else:
        from .database import get_db_connection

        with get_db_connection() as conn:
            yield conn


def init_postgres_schema() -> None:
    """Initialize the PostgreSQL schema for the radio tables."""
    if not is_postgres():
        logger.debug("Not using PostgreSQL, skipping schema init")
        return

    import psycopg2

    logger.info("Initializing PostgreSQL schema for radio...")
    conn = psycopg2.connect(get_database_url())
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS tracks (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            artist TEXT NOT NULL DEFAULT '',
            album TEXT,
            duration_seconds REAL,
            audio_url TEXT,
            youtube_url TEXT,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            is_hidden BOOLEAN NOT NULL DEFAULT FALSE,
            sort_order INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS radio_config (
            id TEXT PRIMARY KEY CHECK (id = 'default'),
            is_live BOOLEAN NOT NULL DEFAULT FALSE,
            loop_start_epoch BIGINT NOT NULL DEFAULT 0,
            mode TEXT NOT NULL DEFAULT 'rotation',
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        INSERT INTO radio_config (id, is_live, loop_start_epoch, mode)
        VALUES ('default', FALSE, 0, 'rotation')
        ON CONFLICT (id) DO NOTHING
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS radio_schedule (
            id TEXT PRIMARY KEY,
            track_id TEXT NOT NULL REFERENCES tracks(id) ON DELETE CASCADE,
            day_of_week INTEGER,
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            priority INTEGER NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS user_roles (
            id SERIAL PRIMARY KEY,
            user_id TEXT NOT NULL,
            role TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (user_id, role)
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_tracks_rotation ON tracks(is_active, sort_order)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_radio_schedule_active ON radio_schedule(is_active, start_time)")

    conn.commit()
    cursor.close()
    conn.close()

    logger.info("PostgreSQL schema initialized")
