"""Route handlers for the Web API."""

from tutorlog.web.routes.health import router as health_router
from tutorlog.web.routes.students import router as students_router
from tutorlog.web.routes.logs import router as logs_router

__all__ = [
    "health_router",
    "students_router",
    "logs_router",
]
