"""Repository functions for the logs table."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime

import structlog

from tutorlog.core.records import LogKind, NewLog, SessionLog

logger = structlog.get_logger(__name__)


def insert_log(conn: sqlite3.Connection, log: NewLog, created_at: str) -> int:
    """Insert a log row and return its id.

    Raises:
        sqlite3.IntegrityError: If the student does not exist
    """
    cursor = conn.execute(
        """
        INSERT INTO logs (student_id, created_at, text, tags, kind, image)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            log.student_id,
            created_at,
            log.text,
            json.dumps(list(log.tags), ensure_ascii=False),
            log.kind.value,
            log.image,
        ),
    )
    log_id = cursor.lastrowid
    logger.debug("logs.inserted", log_id=log_id, student_id=log.student_id)
    return log_id


def list_logs_for_student(conn: sqlite3.Connection, student_id: int) -> list[SessionLog]:
    """Get a student's logs, newest first (insertion order breaks ties)."""
    rows = conn.execute(
        """
        SELECT * FROM logs WHERE student_id = ?
        ORDER BY created_at DESC, log_id DESC
        """,
        (student_id,),
    ).fetchall()

    return [_row_to_log(row) for row in rows]


def latest_created_at(conn: sqlite3.Connection) -> str | None:
    """Most recent created_at across all logs."""
    row = conn.execute("SELECT MAX(created_at) AS latest FROM logs").fetchone()
    return row["latest"] if row else None


def delete_log(conn: sqlite3.Connection, log_id: int) -> bool:
    """Delete a log.

    Returns:
        True if a row was deleted
    """
    cursor = conn.execute("DELETE FROM logs WHERE log_id = ?", (log_id,))
    logger.debug("logs.deleted", log_id=log_id)
    return cursor.rowcount > 0


def _row_to_log(row: sqlite3.Row) -> SessionLog:
    """Convert database row to SessionLog."""
    return SessionLog(
        log_id=row["log_id"],
        student_id=row["student_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
        text=row["text"] or "",
        tags=tuple(json.loads(row["tags"] or "[]")),
        kind=LogKind.parse(row["kind"]),
        image=row["image"],
    )
