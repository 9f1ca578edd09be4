"""Pydantic schemas for the Web API.

Serialization models for students, logs and the student dashboard.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


# =============================================================================
# STUDENT SCHEMAS
# =============================================================================


class StudentCreate(BaseModel):
    """Request body for registering a student."""

    name: str = Field(..., min_length=1, max_length=100)
    school: str = Field(default="", max_length=100)
    grade: str = Field(default="", max_length=50)
    goal: str = Field(default="", max_length=500)
    student_phone: str = Field(default="", max_length=30)
    guardian_name: str = Field(default="", max_length=100)
    guardian_phone: str = Field(default="", max_length=30)
    plan_mode: Literal["count", "date"] = "count"
    total_sessions: int | None = Field(default=None, ge=0)
    end_date: date | None = None
    notes: str = Field(default="", max_length=5000)


class StudentUpdate(BaseModel):
    """Request body for a partial profile edit. Only sent fields change."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    school: str | None = Field(default=None, max_length=100)
    grade: str | None = Field(default=None, max_length=50)
    goal: str | None = Field(default=None, max_length=500)
    student_phone: str | None = Field(default=None, max_length=30)
    guardian_name: str | None = Field(default=None, max_length=100)
    guardian_phone: str | None = Field(default=None, max_length=30)
    plan_mode: Literal["count", "date"] | None = None
    total_sessions: int | None = Field(default=None, ge=0)
    end_date: date | None = None
    notes: str | None = Field(default=None, max_length=5000)


class BillingPlanResponse(BaseModel):
    mode: str
    total_sessions: int
    end_date: str | None = None


class StudentResponse(BaseModel):
    """Response for a student."""

    student_id: int
    name: str
    school: str
    grade: str
    goal: str
    student_phone: str
    guardian_name: str
    guardian_phone: str
    plan: BillingPlanResponse
    notes: str
    created_at: str | None = None


class StudentSummaryResponse(StudentResponse):
    """Student list row with aggregate weakness ranking."""

    top_weaknesses: list[str] = Field(default_factory=list)


class StudentListResponse(BaseModel):
    """Response for list of students."""

    students: list[StudentSummaryResponse]
    count: int


class ProfileUpdateResponse(BaseModel):
    student: StudentResponse
    goal_changed: bool = False
    audit_log_id: int | None = None


# =============================================================================
# LOG SCHEMAS
# =============================================================================


class LogCreate(BaseModel):
    """Request body for saving a log."""

    text: str = Field(default="", max_length=10000)
    kind: Literal["lesson", "consultation"] = "lesson"
    image: str | None = None
    confirm: bool = False  # save even if the session block is used up


class LogResponse(BaseModel):
    log_id: int
    student_id: int
    created_at: str
    text: str
    tags: list[str]
    kind: str
    image: str | None = None


# =============================================================================
# DASHBOARD SCHEMAS
# =============================================================================


class ProgressResponse(BaseModel):
    plan: BillingPlanResponse
    current: int | None = None
    total: int | None = None
    remaining: int | None = None
    exhausted: bool | None = None
    end_date: str | None = None
    displayed: bool = False


class ChartPointResponse(BaseModel):
    day: str
    label: str
    tag_count: int


class RecommendationResponse(BaseModel):
    summary: str
    suggestion: str
    focus_tags: list[str] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    """Everything the student detail view needs."""

    profile: StudentResponse
    logs: list[LogResponse]
    lesson_count: int
    consultation_count: int
    progress: ProgressResponse
    attended_days: list[str]
    chart: list[ChartPointResponse]
    recommendation: RecommendationResponse


# =============================================================================
# ERROR / HEALTH SCHEMAS
# =============================================================================


class ErrorResponse(BaseModel):
    detail: str
    field: str | None = None
    progress: dict[str, Any] | None = None
    profile_updated: bool | None = None  # set when only the goal-change log was lost


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
