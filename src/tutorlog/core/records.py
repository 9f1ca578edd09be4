"""Record types shared by the engine, the stores and the surfaces.

StudentProfile is the single canonical profile shape; older record shapes
are reconciled by tutorlog.core.migration before they reach this module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from tutorlog.core.errors import ValidationError

# Reserved tag carried by goal-change audit logs
GOAL_CHANGE_TAG = "goal-change"


class LogKind(str, Enum):
    """Kind of a session log."""

    LESSON = "lesson"
    CONSULTATION = "consultation"

    @classmethod
    def parse(cls, value: str | LogKind | None) -> LogKind:
        """Parse a stored or user-supplied kind. Missing means lesson."""
        if value is None or value == "":
            return cls.LESSON
        if isinstance(value, LogKind):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown log kind '{value}'", field="kind")


class PlanMode(str, Enum):
    """How a billing plan expires."""

    COUNT = "count"
    DATE = "date"


@dataclass(frozen=True)
class BillingPlan:
    """Billing rule for a student's session block.

    count mode caps the number of lesson logs at total_sessions (0 = no cap);
    date mode only carries an informational end_date.
    """

    mode: PlanMode = PlanMode.COUNT
    total_sessions: int = 0
    end_date: date | None = None

    def validate(self) -> None:
        """Raise ValidationError on an inconsistent plan."""
        if self.mode is PlanMode.COUNT and self.total_sessions < 0:
            raise ValidationError(
                "total_sessions must be zero or positive", field="total_sessions"
            )
        if self.mode is PlanMode.DATE and self.end_date is None:
            raise ValidationError(
                "A date plan requires an end date", field="end_date"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "mode": self.mode.value,
            "total_sessions": self.total_sessions,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


@dataclass
class StudentProfile:
    """Profile for a single student."""

    student_id: int
    name: str
    school: str = ""
    grade: str = ""
    goal: str = ""
    student_phone: str = ""
    guardian_name: str = ""
    guardian_phone: str = ""
    plan: BillingPlan = field(default_factory=BillingPlan)
    notes: str = ""
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "student_id": self.student_id,
            "name": self.name,
            "school": self.school,
            "grade": self.grade,
            "goal": self.goal,
            "student_phone": self.student_phone,
            "guardian_name": self.guardian_name,
            "guardian_phone": self.guardian_phone,
            "plan": self.plan.to_dict(),
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class NewLog:
    """Insert shape for a session log. The store assigns id and created_at."""

    student_id: int
    text: str
    tags: tuple[str, ...] = ()
    kind: LogKind = LogKind.LESSON
    image: str | None = None


@dataclass(frozen=True)
class SessionLog:
    """A stored session log. Immutable once written."""

    log_id: int
    student_id: int
    created_at: datetime
    text: str = ""
    tags: tuple[str, ...] = ()
    kind: LogKind = LogKind.LESSON
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "log_id": self.log_id,
            "student_id": self.student_id,
            "created_at": self.created_at.isoformat(),
            "text": self.text,
            "tags": list(self.tags),
            "kind": self.kind.value,
            "image": self.image,
        }


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
