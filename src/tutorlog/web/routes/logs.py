"""Log endpoints."""

from fastapi import APIRouter, Depends, status

from tutorlog.core.student_service import StudentService
from tutorlog.web.dependencies import get_service

router = APIRouter(prefix="/api/logs", tags=["logs"])


@router.delete("/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_log(
    log_id: int,
    service: StudentService = Depends(get_service),
) -> None:
    """Delete a single log."""
    service.delete_log(log_id)
