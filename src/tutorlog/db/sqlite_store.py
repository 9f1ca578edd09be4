"""SQLite implementation of the Store contract."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

import structlog

from tutorlog.core.errors import NotFoundError, StoreError
from tutorlog.core.migration import build_profile, merge_profile, migrate_profile_record
from tutorlog.core.records import NewLog, SessionLog, StudentProfile, utc_now
from tutorlog.core.store import Store
from tutorlog.db import logs_repository, students_repository
from tutorlog.db.database import get_db, init_db

logger = structlog.get_logger(__name__)

# Fixed width so that stored timestamps sort lexically
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"


def format_timestamp(moment: datetime) -> str:
    """Render an aware datetime as a sortable UTC string."""
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


class SqliteStore(Store):
    """Store backed by a local SQLite file.

    Args:
        db_path: Database file, created with its schema if missing
        clock: Returns the timestamp assigned to new records
    """

    def __init__(
        self,
        db_path: Path,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db_path = db_path
        self._clock = clock
        try:
            init_db(db_path)
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"Cannot open database {db_path}: {e}") from e

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """One transaction; sqlite errors surface as StoreError."""
        try:
            with get_db(self.db_path) as conn:
                yield conn
        except sqlite3.Error as e:
            logger.error("store.sqlite_error", path=str(self.db_path), error=str(e))
            raise StoreError(str(e)) from e

    def _log_timestamp(self, conn: sqlite3.Connection) -> str:
        now = format_timestamp(self._clock())
        latest = logs_repository.latest_created_at(conn)
        if latest is not None and latest > now:
            return latest
        return now

    # -- students -------------------------------------------------------

    def get_student(self, student_id: int) -> StudentProfile:
        with self._connection() as conn:
            profile = students_repository.get_student_by_id(conn, student_id)
        if profile is None:
            raise NotFoundError("Student", student_id)
        return profile

    def list_students(self) -> list[StudentProfile]:
        with self._connection() as conn:
            return students_repository.get_all_students(conn)

    def insert_student(self, fields: dict[str, Any]) -> int:
        profile = build_profile(0, migrate_profile_record(fields))
        with self._connection() as conn:
            return students_repository.insert_student(
                conn, profile, format_timestamp(self._clock())
            )

    def update_student(self, student_id: int, fields: dict[str, Any]) -> None:
        with self._connection() as conn:
            self._update_student(conn, student_id, fields)

    def _update_student(
        self,
        conn: sqlite3.Connection,
        student_id: int,
        fields: dict[str, Any],
    ) -> None:
        current = students_repository.get_student_by_id(conn, student_id)
        if current is None:
            raise NotFoundError("Student", student_id)
        students_repository.update_student(conn, merge_profile(current, fields))

    def delete_student(self, student_id: int) -> None:
        with self._connection() as conn:
            if not students_repository.delete_student(conn, student_id):
                raise NotFoundError("Student", student_id)

    def update_student_with_log(
        self,
        student_id: int,
        fields: dict[str, Any],
        log: NewLog | None,
    ) -> int | None:
        """Write the audit log and the profile update in one transaction."""
        with self._connection() as conn:
            self._update_student(conn, student_id, fields)
            if log is None:
                return None
            return logs_repository.insert_log(conn, log, self._log_timestamp(conn))

    # -- logs -----------------------------------------------------------

    def list_logs(self, student_id: int) -> list[SessionLog]:
        with self._connection() as conn:
            return logs_repository.list_logs_for_student(conn, student_id)

    def insert_log(self, log: NewLog) -> int:
        with self._connection() as conn:
            if students_repository.get_student_by_id(conn, log.student_id) is None:
                raise NotFoundError("Student", log.student_id)
            return logs_repository.insert_log(conn, log, self._log_timestamp(conn))

    def delete_log(self, log_id: int) -> None:
        with self._connection() as conn:
            if not logs_repository.delete_log(conn, log_id):
                raise NotFoundError("Log", log_id)
