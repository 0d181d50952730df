"""
SQLite database operations for radio-sync
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from .config import get_data_dir


# Database schema version for migrations
SCHEMA_VERSION = 2

DEFAULT_CONFIG_ID = "default"


def get_database_path() -> Path:
    """Get the path to the SQLite database file."""
    return get_data_dir() / "radio_sync.db"


@contextmanager
def get_db_connection():
    """Get a database connection with proper cleanup and concurrency support."""
    db_path = get_database_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row  # Enable dict-like access

    # WAL mode lets listeners read the config while an admin toggle writes it
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    try:
        yield conn
    finally:
        conn.close()


def migrate_database(conn, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 1:
        # v1: catalog, broadcast config and roles
        conn.execute("""
            CREATE TABLE IF NOT EXISTS tracks (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                artist TEXT NOT NULL DEFAULT '',
                album TEXT,
                duration_seconds REAL,
                audio_url TEXT,
                youtube_url TEXT,
                is_active BOOLEAN NOT NULL DEFAULT 1,
                is_hidden BOOLEAN NOT NULL DEFAULT 0,
                sort_order INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS radio_config (
                id TEXT PRIMARY KEY CHECK (id = 'default'), -- Ensure only one row
                is_live BOOLEAN NOT NULL DEFAULT 0,
                loop_start_epoch INTEGER NOT NULL DEFAULT 0,
                mode TEXT NOT NULL DEFAULT 'rotation',
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS user_roles (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                role TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (user_id, role)
            )
        """)

        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_tracks_rotation ON tracks (is_active, sort_order)"
        )
        conn.commit()

    if current_version < 2:
        # v2: time-slot schedule for scheduled/hybrid programming
        conn.execute("""
            CREATE TABLE IF NOT EXISTS radio_schedule (
                id TEXT PRIMARY KEY,
                track_id TEXT NOT NULL,
                day_of_week INTEGER, -- 0 = Sunday .. 6 = Saturday, NULL = every day
                start_time TEXT NOT NULL, -- "HH:MM"
                end_time TEXT NOT NULL, -- "HH:MM"
                priority INTEGER NOT NULL DEFAULT 0,
                is_active BOOLEAN NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (track_id) REFERENCES tracks (id) ON DELETE CASCADE
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_radio_schedule_active ON radio_schedule (is_active, start_time)"
        )
        conn.commit()


def init_database() -> None:
    """Initialize the database, run migrations and seed the broadcast config."""
    with get_db_connection() as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        cursor = conn.execute("SELECT MAX(version) AS version FROM schema_version")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        if current_version < SCHEMA_VERSION:
            logger.info(
                f"Migrating database from v{current_version} to v{SCHEMA_VERSION}"
            )
            migrate_database(conn, current_version)
            conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )

        # Seed the singleton config; offline until an admin goes live
        conn.execute(
            """
            INSERT OR IGNORE INTO radio_config (id, is_live, loop_start_epoch, mode)
            VALUES (?, 0, 0, 'rotation')
            """,
            (DEFAULT_CONFIG_ID,),
        )
        conn.commit()
