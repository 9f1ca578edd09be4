"""Shared fixtures for CLI and Web API tests (F3)."""

import pytest
from fastapi.testclient import TestClient

from tutorlog.config.app_config import DB_PATH_ENV, clear_config_cache
from tutorlog.core.store import InMemoryStore
from tutorlog.web.api import create_app


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Point the configured database at a temp file with default config."""
    monkeypatch.chdir(tmp_path)
    db_path = tmp_path / "db" / "test.db"
    monkeypatch.setenv(DB_PATH_ENV, str(db_path))
    clear_config_cache()
    yield db_path
    clear_config_cache()


@pytest.fixture
def client(isolated_env):
    """Test client over an in-memory store."""
    app = create_app(store=InMemoryStore())
    return TestClient(app)
