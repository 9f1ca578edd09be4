"""Student endpoints.

Errors raised by the service (ValidationError, NotFoundError,
SessionCapReachedError, StoreError) are mapped to HTTP responses by the
handlers registered in tutorlog.web.api.
"""

from fastapi import APIRouter, Depends, status

from tutorlog.core.student_service import StudentService
from tutorlog.web.dependencies import get_service
from tutorlog.web.schemas import (
    DashboardResponse,
    LogCreate,
    LogResponse,
    ProfileUpdateResponse,
    StudentCreate,
    StudentListResponse,
    StudentResponse,
    StudentSummaryResponse,
    StudentUpdate,
)

router = APIRouter(prefix="/api/students", tags=["students"])


@router.get("", response_model=StudentListResponse)
async def list_students(
    search: str = "",
    service: StudentService = Depends(get_service),
) -> StudentListResponse:
    """List students with their top weaknesses."""
    summaries = service.list_students(search=search)
    students = [StudentSummaryResponse.model_validate(s.to_dict()) for s in summaries]
    return StudentListResponse(students=students, count=len(students))


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    student_data: StudentCreate,
    service: StudentService = Depends(get_service),
) -> StudentResponse:
    """Register a new student."""
    profile = service.register_student(**student_data.model_dump())
    return StudentResponse.model_validate(profile.to_dict())


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: int,
    service: StudentService = Depends(get_service),
) -> StudentResponse:
    """Get a specific student by ID."""
    profile = service.store.get_student(student_id)
    return StudentResponse.model_validate(profile.to_dict())


@router.patch("/{student_id}", response_model=ProfileUpdateResponse)
async def update_student(
    student_id: int,
    update: StudentUpdate,
    service: StudentService = Depends(get_service),
) -> ProfileUpdateResponse:
    """Edit a profile. Changing the goal records a goal-change log."""
    fields = {
        key: value
        for key, value in update.model_dump(exclude_unset=True).items()
        if value is not None
    }
    result = service.update_profile(student_id, fields)
    return ProfileUpdateResponse(
        student=StudentResponse.model_validate(result.profile.to_dict()),
        goal_changed=result.goal_changed,
        audit_log_id=result.audit_log_id,
    )


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: int,
    service: StudentService = Depends(get_service),
) -> None:
    """Delete a student and all of their logs."""
    service.delete_student(student_id)


@router.get("/{student_id}/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    student_id: int,
    service: StudentService = Depends(get_service),
) -> DashboardResponse:
    """Progress, attendance, chart and recommendation for a student."""
    dashboard = service.load_dashboard(student_id)
    return DashboardResponse.model_validate(dashboard.to_dict())


@router.post(
    "/{student_id}/logs",
    response_model=LogResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_log(
    student_id: int,
    log_data: LogCreate,
    service: StudentService = Depends(get_service),
) -> LogResponse:
    """Save a lesson or consultation log.

    Returns 409 when the session block is used up and `confirm` is false.
    """
    log = service.save_log(
        student_id,
        log_data.text,
        kind=log_data.kind,
        image=log_data.image,
        confirm=log_data.confirm,
    )
    return LogResponse.model_validate(log.to_dict())
