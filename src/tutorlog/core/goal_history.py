"""Goal change detection.

When a profile edit changes the student's goal, an audit log is produced
with the fixed text "goal changed: <old> -> <new>" and the reserved
`goal-change` tag. Comparison is exact: "Math" and "Math " differ.

Persisting the audit log together with the profile update is the store's
job (Store.update_student_with_log).
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog

from tutorlog.core.records import GOAL_CHANGE_TAG, LogKind, NewLog, StudentProfile

logger = structlog.get_logger(__name__)

GOAL_CHANGE_TEMPLATE = "goal changed: {old} -> {new}"


@dataclass(frozen=True)
class GoalUpdate:
    """Proposed profile update plus the audit log it requires, if any."""

    updated_profile: StudentProfile
    audit_log: NewLog | None = None

    @property
    def goal_changed(self) -> bool:
        return self.audit_log is not None


def goal_change_text(old_goal: str, new_goal: str) -> str:
    """Render the audit text for a goal change."""
    return GOAL_CHANGE_TEMPLATE.format(old=old_goal, new=new_goal)


def apply_goal_update(
    profile: StudentProfile,
    new_goal: str,
    kind: LogKind = LogKind.CONSULTATION,
) -> GoalUpdate:
    """Apply a new goal to a profile and build the audit log if it changed.

    The input profile is not mutated.

    Args:
        profile: Current stored profile
        new_goal: Goal as submitted by the editor
        kind: Kind given to the audit log

    Returns:
        GoalUpdate with the updated profile and the audit log (or None)
    """
    updated = replace(profile, goal=new_goal)

    if new_goal == profile.goal:
        return GoalUpdate(updated_profile=updated)

    audit = NewLog(
        student_id=profile.student_id,
        text=goal_change_text(profile.goal, new_goal),
        tags=(GOAL_CHANGE_TAG,),
        kind=kind,
    )
    logger.info(
        "goal_change.detected",
        student_id=profile.student_id,
        old_goal=profile.goal,
        new_goal=new_goal,
    )
    return GoalUpdate(updated_profile=updated, audit_log=audit)
