"""Session progress under a student's billing plan.

count plans: current/total/remaining with an advisory `exhausted` flag.
A total of 0 means "no cap": never exhausted and not displayed.

date plans: no numeric progress; only the end date is reported, and
exhaustion is left to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from tutorlog.core.records import BillingPlan, PlanMode, SessionLog, StudentProfile


@dataclass(frozen=True)
class SessionProgress:
    """Progress snapshot. Numeric fields are None for date plans."""

    plan: BillingPlan
    current: int | None = None
    total: int | None = None
    remaining: int | None = None
    exhausted: bool | None = None
    end_date: date | None = None
    displayed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "plan": self.plan.to_dict(),
            "current": self.current,
            "total": self.total,
            "remaining": self.remaining,
            "exhausted": self.exhausted,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "displayed": self.displayed,
        }


def compute_progress(
    profile: StudentProfile,
    lesson_logs: Sequence[SessionLog],
) -> SessionProgress:
    """Compute progress for a profile from its lesson logs only.

    Args:
        profile: Student profile carrying the billing plan
        lesson_logs: Lesson logs (consultations excluded)

    Returns:
        SessionProgress for display
    """
    plan = profile.plan

    if plan.mode is PlanMode.DATE:
        return SessionProgress(
            plan=plan,
            end_date=plan.end_date,
            displayed=plan.end_date is not None,
        )

    total = plan.total_sessions or 0
    current = len(lesson_logs)
    remaining = total - current
    capped = total > 0

    return SessionProgress(
        plan=plan,
        current=current,
        total=total,
        remaining=remaining,
        exhausted=capped and remaining <= 0,
        displayed=capped,
    )
