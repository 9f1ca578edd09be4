"""Request-scoped access to the student service."""

from fastapi import Request

from tutorlog.config.app_config import load_app_config
from tutorlog.core.student_service import StudentService
from tutorlog.db.sqlite_store import SqliteStore


def get_service(request: Request) -> StudentService:
    """Return the app's StudentService, creating it on first use.

    A store passed to create_app() is used as is; otherwise the configured
    SQLite database is opened.
    """
    service = getattr(request.app.state, "service", None)
    if service is None:
        config = load_app_config()
        store = request.app.state.store or SqliteStore(config.db_path)
        service = StudentService(store, config)
        request.app.state.service = service
    return service
