"""Student record operations.

Responsibilities:
- Validate input before any store call
- Tag logs at write time and enforce the advisory session cap
- Run goal-change detection on profile edits and persist both writes
  through Store.update_student_with_log
- Assemble the dashboard (progress, attendance, chart, recommendation)
  from a fresh log list on every load

The service holds no state besides its collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Any

import structlog

from tutorlog.config.app_config import AppConfig, load_app_config
from tutorlog.core.attendance import attended_days
from tutorlog.core.chart import ChartPoint, chart_series
from tutorlog.core.classifier import split_logs
from tutorlog.core.errors import NotFoundError, SessionCapReachedError, ValidationError
from tutorlog.core.goal_history import apply_goal_update
from tutorlog.core.migration import (
    CANONICAL_FIELDS,
    build_profile,
    merge_profile,
    migrate_profile_record,
)
from tutorlog.core.progress import SessionProgress, compute_progress
from tutorlog.core.recommendation import Recommendation, recommend
from tutorlog.core.records import (
    LogKind,
    NewLog,
    PlanMode,
    SessionLog,
    StudentProfile,
)
from tutorlog.core.store import Store
from tutorlog.core.tagging import extract_tags, rank_weaknesses
from tutorlog.utils.validators import parse_plan, require_name, validate_phone

logger = structlog.get_logger(__name__)

PHONE_FIELDS = ("student_phone", "guardian_phone")


@dataclass
class StudentSummary:
    """Row of the student list."""

    profile: StudentProfile
    top_weaknesses: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {**self.profile.to_dict(), "top_weaknesses": self.top_weaknesses}


@dataclass
class StudentDashboard:
    """Everything the student detail view shows, derived in one load."""

    profile: StudentProfile
    logs: list[SessionLog]
    lesson_logs: list[SessionLog]
    consultation_logs: list[SessionLog]
    progress: SessionProgress
    attended_days: list[date]
    chart: list[ChartPoint]
    recommendation: Recommendation

    def is_attended(self, day: date) -> bool:
        return day in self.attended_days

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "profile": self.profile.to_dict(),
            "logs": [log.to_dict() for log in self.logs],
            "lesson_count": len(self.lesson_logs),
            "consultation_count": len(self.consultation_logs),
            "progress": self.progress.to_dict(),
            "attended_days": [day.isoformat() for day in self.attended_days],
            "chart": [point.to_dict() for point in self.chart],
            "recommendation": self.recommendation.to_dict(),
        }


@dataclass
class ProfileUpdateResult:
    profile: StudentProfile
    audit_log_id: int | None = None

    @property
    def goal_changed(self) -> bool:
        return self.audit_log_id is not None


def _validate_phones(fields: dict[str, Any]) -> None:
    for key in PHONE_FIELDS:
        value = fields.get(key)
        if value and not validate_phone(str(value)):
            raise ValidationError(f"Invalid phone number '{value}'", field=key)


class StudentService:
    """Operations on students and their logs over a Store.

    Args:
        store: Persistence collaborator
        config: App config (keyword table, analytics tunables).
            Defaults to load_app_config()
    """

    def __init__(self, store: Store, config: AppConfig | None = None):
        self.store = store
        self.config = config or load_app_config()

    # -- students -------------------------------------------------------

    def register_student(
        self,
        name: str,
        school: str = "",
        grade: str = "",
        goal: str = "",
        student_phone: str = "",
        guardian_name: str = "",
        guardian_phone: str = "",
        plan_mode: str | PlanMode = PlanMode.COUNT,
        total_sessions: int | None = None,
        end_date: date | str | None = None,
        notes: str = "",
    ) -> StudentProfile:
        """Register a new student.

        A count plan without an explicit total gets the configured default.

        Raises:
            ValidationError: Blank name, bad phone or invalid plan
        """
        require_name(name)
        if total_sessions is None and (plan_mode or PlanMode.COUNT) == PlanMode.COUNT:
            total_sessions = self.config.analytics.default_total_sessions
        plan = parse_plan(plan_mode, total_sessions, end_date)

        fields = {
            "name": name,
            "school": school,
            "grade": grade,
            "goal": goal,
            "student_phone": student_phone,
            "guardian_name": guardian_name,
            "guardian_phone": guardian_phone,
            "plan_mode": plan.mode.value,
            "total_sessions": plan.total_sessions,
            "end_date": plan.end_date,
            "notes": notes,
        }
        _validate_phones(fields)

        student_id = self.store.insert_student(fields)
        logger.info("student.registered", student_id=student_id, plan=plan.mode.value)
        return self.store.get_student(student_id)

    def import_records(self, records: list[dict[str, Any]]) -> list[int]:
        """Import profile records of any schema generation.

        Every record is migrated and validated before the first insert.

        Returns:
            New student ids, in input order

        Raises:
            ValidationError: A record is not a mapping or fails validation
        """
        if not isinstance(records, list):
            raise ValidationError("Expected a list of student records")

        migrated = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise ValidationError(
                    f"Record {index} is not an object: {record!r}", field="records"
                )
            fields = migrate_profile_record(record)
            build_profile(0, fields)
            _validate_phones(fields)
            migrated.append(fields)

        ids = [self.store.insert_student(fields) for fields in migrated]
        logger.info("students.imported", count=len(ids))
        return ids

    def list_students(self, search: str = "") -> list[StudentSummary]:
        """List students with their top weaknesses.

        Args:
            search: Substring matched against name or school

        Returns:
            StudentSummary list, most recently registered first
        """
        analytics = self.config.analytics
        summaries = []
        for profile in self.store.list_students():
            if search and search not in profile.name and search not in profile.school:
                continue
            logs = self.store.list_logs(profile.student_id)
            summaries.append(
                StudentSummary(
                    profile=profile,
                    top_weaknesses=rank_weaknesses(
                        logs, self.config.keywords, limit=analytics.top_weaknesses
                    ),
                )
            )
        return summaries

    def update_profile(
        self,
        student_id: int,
        fields: dict[str, Any],
        goal_change_kind: LogKind | None = None,
    ) -> ProfileUpdateResult:
        """Apply a profile edit, recording a goal change if there is one.

        Args:
            student_id: Student to edit
            fields: Partial canonical fields
            goal_change_kind: Kind of the audit log (config default if None)

        Raises:
            ValidationError: Unknown field or invalid resulting profile
            NotFoundError: Unknown student
            StoreError: Persisting failed (GoalAuditError if only the
                audit log was lost)
        """
        unknown = sorted(set(fields) - set(CANONICAL_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown profile fields: {', '.join(unknown)}")
        _validate_phones(fields)

        current = self.store.get_student(student_id)
        merge_profile(current, fields)

        audit_log = None
        if "goal" in fields:
            kind = goal_change_kind or self.config.analytics.goal_change_kind
            audit_log = apply_goal_update(current, fields["goal"], kind=kind).audit_log

        log_id = self.store.update_student_with_log(student_id, fields, audit_log)
        logger.info(
            "student.updated",
            student_id=student_id,
            fields=sorted(fields),
            goal_changed=log_id is not None,
        )
        return ProfileUpdateResult(
            profile=self.store.get_student(student_id),
            audit_log_id=log_id,
        )

    def delete_student(self, student_id: int) -> None:
        """Delete a student and, through the store, all of their logs."""
        self.store.delete_student(student_id)
        logger.info("student.deleted", student_id=student_id)

    # -- logs -----------------------------------------------------------

    def tag_text(self, text: str) -> list[str]:
        """Weakness tags for a piece of text."""
        return extract_tags(text, self.config.keywords)

    def save_log(
        self,
        student_id: int,
        text: str,
        kind: str | LogKind = LogKind.LESSON,
        image: str | None = None,
        confirm: bool = False,
    ) -> SessionLog:
        """Save a lesson or consultation log.

        A lesson saved when the count plan is already exhausted needs
        `confirm=True`; without it SessionCapReachedError is raised and
        nothing is written.

        Raises:
            ValidationError: No text and no image, or unknown kind
            NotFoundError: Unknown student
            SessionCapReachedError: Cap reached and not confirmed
        """
        log_kind = LogKind.parse(kind)
        text = text or ""
        if not text.strip() and not image:
            raise ValidationError("A log needs text or an image", field="text")

        profile = self.store.get_student(student_id)
        if log_kind is LogKind.LESSON:
            lessons = split_logs(self.store.list_logs(student_id)).lesson_logs
            progress = compute_progress(profile, lessons)
            if progress.exhausted and not confirm:
                logger.info(
                    "log.cap_reached",
                    student_id=student_id,
                    current=progress.current,
                    total=progress.total,
                )
                raise SessionCapReachedError(progress)

        new_log = NewLog(
            student_id=student_id,
            text=text,
            tags=tuple(self.tag_text(text)),
            kind=log_kind,
            image=image,
        )
        log_id = self.store.insert_log(new_log)
        logger.info("log.saved", student_id=student_id, log_id=log_id, kind=log_kind.value)

        for log in self.store.list_logs(student_id):
            if log.log_id == log_id:
                return log
        raise NotFoundError("Log", log_id)

    def delete_log(self, log_id: int) -> None:
        self.store.delete_log(log_id)
        logger.info("log.deleted", log_id=log_id)

    # -- dashboard ------------------------------------------------------

    def load_dashboard(self, student_id: int, tz: tzinfo | None = None) -> StudentDashboard:
        """Load a student and derive every view from their full log list.

        Args:
            student_id: Student to load
            tz: Caller's time zone for calendar days (system local if None)
        """
        analytics = self.config.analytics
        profile = self.store.get_student(student_id)
        logs = self.store.list_logs(student_id)
        classified = split_logs(logs)

        return StudentDashboard(
            profile=profile,
            logs=logs,
            lesson_logs=classified.lesson_logs,
            consultation_logs=classified.consultation_logs,
            progress=compute_progress(profile, classified.lesson_logs),
            attended_days=sorted(attended_days(classified.lesson_logs, tz)),
            chart=chart_series(classified.lesson_logs, tz),
            recommendation=recommend(
                profile,
                classified.lesson_logs,
                classified.consultation_logs,
                max_chars=analytics.summary_max_chars,
                window=analytics.recent_lesson_window,
                tz=tz,
            ),
        )
