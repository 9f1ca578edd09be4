"""Shared fixtures for store and service tests (F2)."""

from datetime import datetime, timedelta, timezone

import pytest

from tutorlog.config.app_config import DEFAULT_KEYWORDS, AppConfig
from tutorlog.core.store import InMemoryStore
from tutorlog.core.student_service import StudentService
from tutorlog.core.tagging import KeywordRule
from tutorlog.db.sqlite_store import SqliteStore


class StepClock:
    """Deterministic clock: each call moves forward by `step`."""

    def __init__(self, start=None, step=timedelta(minutes=1)):
        self.now = start or datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def config(tmp_path):
    """Config with the default keyword table and no file lookups."""
    return AppConfig(
        db_path=tmp_path / "db" / "tutorlog.db",
        keywords=[KeywordRule(k, v) for k, v in DEFAULT_KEYWORDS],
    )


@pytest.fixture
def memory_store(clock):
    return InMemoryStore(clock=clock)


@pytest.fixture
def sqlite_store(tmp_path, clock):
    return SqliteStore(tmp_path / "db" / "tutorlog.db", clock=clock)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path, clock):
    """Run a test against both store implementations."""
    if request.param == "memory":
        return InMemoryStore(clock=clock)
    return SqliteStore(tmp_path / "db" / "tutorlog.db", clock=clock)


@pytest.fixture
def service(store, config):
    return StudentService(store, config)
