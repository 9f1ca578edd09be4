"""Input validation helpers.

Functions:
- require_name(name) -> str: Reject empty or blank names
- validate_phone(phone) -> bool: Loose phone number check (empty is valid)
- parse_date(value) -> date | None: Accept date objects or ISO strings
- parse_plan(mode, total_sessions, end_date) -> BillingPlan: Validated plan
"""

from __future__ import annotations

import re
from datetime import date, datetime

from tutorlog.core.errors import ValidationError
from tutorlog.core.records import BillingPlan, PlanMode

# Digits with optional +, spaces, dashes, dots or parentheses
PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9 ().-]{5,19}$")


def require_name(name: str | None) -> str:
    """Return the name unchanged, or raise if it is blank."""
    if name is None or not name.strip():
        raise ValidationError("Name is required", field="name")
    return name


def validate_phone(phone: str) -> bool:
    """Validate phone format. Empty string is valid (optional field)."""
    if not phone:
        return True
    return bool(PHONE_PATTERN.match(phone.strip()))


def parse_date(value: date | str | None) -> date | None:
    """Parse a calendar date.

    Examples:
        "2026-03-01" -> date(2026, 3, 1)
        "2026-03-01T09:00:00+00:00" -> date(2026, 3, 1)
        "" -> None
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    try:
        if "T" in text or " " in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid date '{value}'", field="end_date")


def parse_plan(
    mode: str | PlanMode | None,
    total_sessions: int | str | None = None,
    end_date: date | str | None = None,
) -> BillingPlan:
    """Build and validate a BillingPlan from loosely typed input.

    Raises:
        ValidationError: Unknown mode, non-integer count, negative count,
            or date mode without an end date
    """
    if mode is None or mode == "":
        mode = PlanMode.COUNT
    try:
        plan_mode = PlanMode(mode)
    except ValueError:
        raise ValidationError(f"Unknown plan mode '{mode}'", field="plan_mode")

    try:
        total = int(total_sessions) if total_sessions not in (None, "") else 0
    except (TypeError, ValueError):
        raise ValidationError(
            f"total_sessions must be an integer, got '{total_sessions}'",
            field="total_sessions",
        )

    plan = BillingPlan(mode=plan_mode, total_sessions=total, end_date=parse_date(end_date))
    plan.validate()
    return plan
