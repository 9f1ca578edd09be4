"""SQLite database connection and schema management.

Provides connection management and schema initialization for tutorlog.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/tutorlog.db")

# Bumped whenever the schema below changes
SCHEMA_VERSION = 2

# Current connection (module-level for simplicity in CLI context)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/tutorlog.db
    """
    global _db_path
    _db_path = db_path or DEFAULT_DB_PATH

    with get_db(_db_path) as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Everything done inside the block is one transaction: committed on
    success, rolled back on any exception.

    Args:
        db_path: Database file. Defaults to the path given to init_db()

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM students").fetchall()
    """
    db_path = db_path or _db_path or DEFAULT_DB_PATH

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- students: one canonical profile shape (student_profile_v2)
        CREATE TABLE IF NOT EXISTS students (
            student_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL CHECK(length(trim(name)) > 0),
            school TEXT NOT NULL DEFAULT '',
            grade TEXT NOT NULL DEFAULT '',
            goal TEXT NOT NULL DEFAULT '',
            student_phone TEXT NOT NULL DEFAULT '',
            guardian_name TEXT NOT NULL DEFAULT '',
            guardian_phone TEXT NOT NULL DEFAULT '',
            plan_mode TEXT NOT NULL DEFAULT 'count' CHECK(plan_mode IN ('count', 'date')),
            total_sessions INTEGER NOT NULL DEFAULT 0 CHECK(total_sessions >= 0),
            end_date TEXT,
            notes TEXT NOT NULL DEFAULT '',
            created_at TEXT NOT NULL
        );

        -- logs: immutable session notes, removed with their student
        CREATE TABLE IF NOT EXISTS logs (
            log_id INTEGER PRIMARY KEY AUTOINCREMENT,
            student_id INTEGER NOT NULL
                REFERENCES students(student_id) ON DELETE CASCADE,
            created_at TEXT NOT NULL,
            text TEXT NOT NULL DEFAULT '',
            tags TEXT NOT NULL DEFAULT '[]',
            kind TEXT DEFAULT 'lesson' CHECK(kind IN ('lesson', 'consultation')),
            image TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_logs_student_created
            ON logs(student_id, created_at DESC);
        """
    )
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
