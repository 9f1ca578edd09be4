"""Store contract and an in-memory implementation.

The engine never persists anything itself; the service layer talks to a
Store. Contract:

- list_logs() returns logs newest-created first
- created_at is assigned at insert time and never decreases in insert order
- delete_student() also deletes that student's logs
- any failing call raises StoreError (NotFoundError for unknown ids)

update_student_with_log() writes a goal-change audit log together with the
profile update. The base implementation is two independent calls; stores
with transactions (SqliteStore) override it.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

import structlog

from tutorlog.core.errors import GoalAuditError, NotFoundError, StoreError
from tutorlog.core.migration import build_profile, merge_profile, migrate_profile_record
from tutorlog.core.records import NewLog, SessionLog, StudentProfile, utc_now

logger = structlog.get_logger(__name__)


class Store(ABC):
    """Persistence collaborator for students and their logs."""

    @abstractmethod
    def get_student(self, student_id: int) -> StudentProfile:
        """Return a profile or raise NotFoundError."""

    @abstractmethod
    def list_students(self) -> list[StudentProfile]:
        """All profiles, most recently registered first."""

    @abstractmethod
    def insert_student(self, fields: dict[str, Any]) -> int:
        """Create a student from canonical (or legacy) fields, return its id."""

    @abstractmethod
    def update_student(self, student_id: int, fields: dict[str, Any]) -> None:
        """Apply a partial canonical update."""

    @abstractmethod
    def delete_student(self, student_id: int) -> None:
        """Delete a student and all of their logs."""

    @abstractmethod
    def list_logs(self, student_id: int) -> list[SessionLog]:
        """A student's logs, newest first."""

    @abstractmethod
    def insert_log(self, log: NewLog) -> int:
        """Insert a log, assigning id and created_at."""

    @abstractmethod
    def delete_log(self, log_id: int) -> None:
        """Delete a single log."""

    def update_student_with_log(
        self,
        student_id: int,
        fields: dict[str, Any],
        log: NewLog | None,
    ) -> int | None:
        """Update a profile and write its audit log in one logical step.

        Non-transactional: the audit log is written first, then the profile.
        A failed audit write does not stop the profile update; it is
        reported afterwards as GoalAuditError. A failed profile update after
        a successful audit write leaves an orphan audit log behind (known
        limitation) and raises the StoreError.

        Returns:
            Id of the audit log, or None when no log was written
        """
        if log is None:
            self.update_student(student_id, fields)
            return None

        audit_error: StoreError | None = None
        log_id: int | None = None
        try:
            log_id = self.insert_log(log)
        except StoreError as e:
            audit_error = e
            logger.warning(
                "goal_change.audit_failed", student_id=student_id, error=str(e)
            )

        try:
            self.update_student(student_id, fields)
        except StoreError:
            if log_id is not None:
                logger.error(
                    "goal_change.profile_update_failed",
                    student_id=student_id,
                    orphan_log_id=log_id,
                )
            raise

        if audit_error is not None:
            raise GoalAuditError(
                f"Profile updated but goal-change log was not saved: {audit_error}",
                student_id=student_id,
                fields=fields,
            ) from audit_error

        return log_id


class InMemoryStore(Store):
    """Dictionary-backed store, for tests and embedding.

    Args:
        clock: Returns the timestamp assigned to new records
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._students: dict[int, StudentProfile] = {}
        self._logs: dict[int, SessionLog] = {}
        self._student_ids = itertools.count(1)
        self._log_ids = itertools.count(1)
        self._last_created_at: datetime | None = None

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_created_at is not None and now < self._last_created_at:
            now = self._last_created_at
        self._last_created_at = now
        return now

    def get_student(self, student_id: int) -> StudentProfile:
        try:
            profile = self._students[student_id]
        except KeyError:
            raise NotFoundError("Student", student_id)
        # copies, so that edits only land through update_student
        return replace(profile)

    def list_students(self) -> list[StudentProfile]:
        profiles = sorted(
            self._students.values(),
            key=lambda s: (s.created_at, s.student_id),
            reverse=True,
        )
        return [replace(profile) for profile in profiles]

    def insert_student(self, fields: dict[str, Any]) -> int:
        canonical = migrate_profile_record(fields)
        student_id = next(self._student_ids)
        profile = build_profile(student_id, canonical, created_at=self._next_timestamp())
        self._students[student_id] = profile
        logger.debug("students.inserted", student_id=student_id)
        return student_id

    def update_student(self, student_id: int, fields: dict[str, Any]) -> None:
        profile = self.get_student(student_id)
        self._students[student_id] = merge_profile(profile, fields)
        logger.debug("students.updated", student_id=student_id, fields=sorted(fields))

    def delete_student(self, student_id: int) -> None:
        self.get_student(student_id)
        del self._students[student_id]
        for log_id in [i for i, log in self._logs.items() if log.student_id == student_id]:
            del self._logs[log_id]
        logger.debug("students.deleted", student_id=student_id)

    def list_logs(self, student_id: int) -> list[SessionLog]:
        logs = [log for log in self._logs.values() if log.student_id == student_id]
        return sorted(logs, key=lambda log: (log.created_at, log.log_id), reverse=True)

    def insert_log(self, log: NewLog) -> int:
        self.get_student(log.student_id)
        log_id = next(self._log_ids)
        self._logs[log_id] = SessionLog(
            log_id=log_id,
            student_id=log.student_id,
            created_at=self._next_timestamp(),
            text=log.text,
            tags=tuple(log.tags),
            kind=log.kind,
            image=log.image,
        )
        logger.debug("logs.inserted", log_id=log_id, student_id=log.student_id)
        return log_id

    def delete_log(self, log_id: int) -> None:
        if log_id not in self._logs:
            raise NotFoundError("Log", log_id)
        del self._logs[log_id]
        logger.debug("logs.deleted", log_id=log_id)
