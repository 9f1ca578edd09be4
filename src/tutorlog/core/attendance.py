"""Attendance derived from lesson logs.

A calendar day is attended when at least one lesson log was created on it,
in the caller's local time zone. Consultation logs must be filtered out by
the caller (see tutorlog.core.classifier).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, tzinfo

from tutorlog.core.records import SessionLog


def local_day(moment: datetime, tz: tzinfo | None = None) -> date:
    """Truncate a timestamp to a calendar date in `tz` (system local if None)."""
    return moment.astimezone(tz).date()


def attended_days(
    lesson_logs: Iterable[SessionLog],
    tz: tzinfo | None = None,
) -> set[date]:
    """Collect the days on which lessons took place."""
    return {local_day(log.created_at, tz) for log in lesson_logs}


def is_attended(
    day: date,
    lesson_logs: Iterable[SessionLog],
    tz: tzinfo | None = None,
) -> bool:
    """Whether a calendar day has at least one lesson log."""
    return day in attended_days(lesson_logs, tz)
