"""Shared fixtures for engine tests (F1)."""

from datetime import datetime, timezone

import pytest

from tutorlog.core.records import LogKind, SessionLog
from tutorlog.core.tagging import KeywordRule


@pytest.fixture
def keyword_table():
    """Small keyword table with two keywords sharing a label."""
    return [
        KeywordRule("fraction", "fractions"),
        KeywordRule("slow", "speed"),
        KeywordRule("hurry", "speed"),
        KeywordRule("mistake", "careless"),
    ]


@pytest.fixture
def utc():
    """Build aware UTC datetimes: utc(2026, 3, 1, hour=9)."""

    def _utc(year, month, day, hour=12, minute=0):
        return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)

    return _utc


@pytest.fixture
def make_log():
    """Factory for SessionLog objects with sequential ids."""
    counter = {"id": 0}

    def _make(created_at, text="", tags=(), kind=LogKind.LESSON, student_id=1):
        counter["id"] += 1
        return SessionLog(
            log_id=counter["id"],
            student_id=student_id,
            created_at=created_at,
            text=text,
            tags=tuple(tags),
            kind=kind,
        )

    return _make
