"""FastAPI application factory.

Main entry point for the tutorlog Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tutorlog.core.errors import (
    GoalAuditError,
    NotFoundError,
    SessionCapReachedError,
    StoreError,
    ValidationError,
)
from tutorlog.core.store import Store
from tutorlog.web.routes import health_router, logs_router, students_router
from tutorlog.web.schemas import ErrorResponse

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    logger.info(
        "api_startup",
        store=type(app.state.store).__name__ if app.state.store else "SqliteStore",
    )
    yield


def _error(status_code: int, exc: Exception, **extra) -> JSONResponse:
    body = ErrorResponse(detail=str(exc), **extra)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, exc, field=exc.field)


async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, exc)


async def _cap_reached_handler(request: Request, exc: SessionCapReachedError) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, exc, progress=exc.progress.to_dict())


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("api_store_error", path=request.url.path, error=str(exc))
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


async def _goal_audit_error_handler(request: Request, exc: GoalAuditError) -> JSONResponse:
    logger.error(
        "api_goal_audit_lost",
        path=request.url.path,
        student_id=exc.student_id,
        error=str(exc),
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, profile_updated=True)


def create_app(store: Store | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Store to serve from. Defaults to the configured SQLite file,
            opened on first request.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="tutorlog API",
        description="Student records, session logs and consultation prep",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.store = store
    app.state.service = None

    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(SessionCapReachedError, _cap_reached_handler)
    app.add_exception_handler(GoalAuditError, _goal_audit_error_handler)
    app.add_exception_handler(StoreError, _store_error_handler)

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(students_router)
    app.include_router(logs_router)

    return app


# Default app instance for uvicorn
app = create_app()
