"""Error taxonomy for the record keeper.

- ValidationError: bad input, raised before any store call
- NotFoundError: unknown student or log id
- StoreError: any failing store call (wraps the underlying message)
- GoalAuditError: goal-change audit write failed, profile update applied
- SessionCapReachedError: advisory, the billing plan's session cap is met
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tutorlog.core.progress import SessionProgress


class TutorlogError(Exception):
    """Base class for all record keeper errors."""

    pass


class ValidationError(TutorlogError):
    """Required field missing or invalid plan configuration."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class NotFoundError(TutorlogError):
    """Raised when a referenced student or log does not exist."""

    def __init__(self, entity: str, entity_id: int | str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class StoreError(TutorlogError):
    """Raised when a store call fails."""

    pass


class GoalAuditError(StoreError):
    """The goal-change audit log could not be written.

    The profile update itself was applied; `student_id` and `fields`
    describe what went through.
    """

    def __init__(self, message: str, student_id: int, fields: dict):
        self.student_id = student_id
        self.fields = fields
        super().__init__(message)


class SessionCapReachedError(TutorlogError):
    """The count plan is exhausted and the save was not confirmed."""

    def __init__(self, progress: SessionProgress):
        self.progress = progress
        super().__init__(
            f"Session cap reached ({progress.current}/{progress.total}); "
            "confirm to record another lesson"
        )
