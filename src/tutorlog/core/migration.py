"""Profile record migration at the store boundary.

Student records were written by several generations of the intake form:

- v0: `goals` (plural) and `total_sessions`, no contact fields
- v1: a single `parent_name` / `parent_phone` pair
- v1b: separate `father_*` / `mother_*` contacts
- v2 (canonical): `goal`, `guardian_name` / `guardian_phone`, explicit plan

migrate_profile_record() maps any of these to the canonical field dict that
Store.insert_student() and Store.update_student() accept. Canonical keeps one
guardian: the first non-empty of parent, mother, father. A second parent's
contact is preserved as a line in `notes`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog

from tutorlog.core.records import PlanMode, StudentProfile
from tutorlog.utils.validators import parse_plan, require_name

logger = structlog.get_logger(__name__)

PROFILE_SCHEMA = "student_profile_v2"

CANONICAL_FIELDS = (
    "name",
    "school",
    "grade",
    "goal",
    "student_phone",
    "guardian_name",
    "guardian_phone",
    "plan_mode",
    "total_sessions",
    "end_date",
    "notes",
)

# Legacy key -> canonical key (simple renames)
_RENAMES = {
    "goals": "goal",
    "phone": "student_phone",
    "memo": "notes",
    "intake_notes": "notes",
    "billing_mode": "plan_mode",
    "plan_end_date": "end_date",
}

# Guardian candidates in priority order
_GUARDIAN_SOURCES = (
    ("guardian", "guardian_name", "guardian_phone"),
    ("parent", "parent_name", "parent_phone"),
    ("mother", "mother_name", "mother_phone"),
    ("father", "father_name", "father_phone"),
)


def needs_migration(record: dict[str, Any]) -> bool:
    """Whether a record is in any legacy shape."""
    if record.get("$schema") == PROFILE_SCHEMA:
        return False
    legacy_keys = set(_RENAMES) | {
        key for _, name_key, phone_key in _GUARDIAN_SOURCES[1:] for key in (name_key, phone_key)
    }
    return any(key in record for key in legacy_keys)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def migrate_profile_record(record: dict[str, Any]) -> dict[str, Any]:
    """Map a profile record of any generation to canonical fields.

    Unknown keys (ids, timestamps, UI state) are dropped. Keys absent from
    the record stay absent, so the result can be used as a partial update.

    Args:
        record: Raw profile dict

    Returns:
        Dict restricted to CANONICAL_FIELDS
    """
    fields: dict[str, Any] = {}

    for key, value in record.items():
        target = _RENAMES.get(key, key)
        if target in CANONICAL_FIELDS and target not in ("guardian_name", "guardian_phone"):
            # canonical key wins over its legacy alias
            if target in fields and key != target:
                continue
            fields[target] = value

    guardians = [
        (role, _text(record.get(name_key)), _text(record.get(phone_key)))
        for role, name_key, phone_key in _GUARDIAN_SOURCES
        if record.get(name_key) or record.get(phone_key)
    ]
    if guardians:
        _, name, phone = guardians[0]
        fields["guardian_name"] = name
        fields["guardian_phone"] = phone
        extra = [
            f"{role}: {name} {phone}".strip()
            for role, name, phone in guardians[1:]
        ]
        if extra:
            notes = _text(fields.get("notes"))
            fields["notes"] = "\n".join(filter(None, [notes, *extra]))
    else:
        for key in ("guardian_name", "guardian_phone"):
            if key in record:
                fields[key] = _text(record[key])

    # v0 records only had a session count
    if "plan_mode" not in fields and ("total_sessions" in fields or "end_date" in fields):
        fields["plan_mode"] = (
            PlanMode.DATE.value
            if fields.get("end_date") and not fields.get("total_sessions")
            else PlanMode.COUNT.value
        )

    if needs_migration(record):
        logger.debug("profile.migrated", name=fields.get("name"), guardians=len(guardians))

    return fields


def profile_to_fields(profile: StudentProfile) -> dict[str, Any]:
    """Flatten a profile into canonical fields."""
    return {
        "name": profile.name,
        "school": profile.school,
        "grade": profile.grade,
        "goal": profile.goal,
        "student_phone": profile.student_phone,
        "guardian_name": profile.guardian_name,
        "guardian_phone": profile.guardian_phone,
        "plan_mode": profile.plan.mode.value,
        "total_sessions": profile.plan.total_sessions,
        "end_date": profile.plan.end_date,
        "notes": profile.notes,
    }


def build_profile(
    student_id: int,
    fields: dict[str, Any],
    created_at: datetime | None = None,
) -> StudentProfile:
    """Build a validated StudentProfile from canonical fields.

    Raises:
        ValidationError: Blank name or invalid plan
    """
    return StudentProfile(
        student_id=student_id,
        name=require_name(fields.get("name")),
        school=_text(fields.get("school")),
        grade=_text(fields.get("grade")),
        goal=_text(fields.get("goal")),
        student_phone=_text(fields.get("student_phone")),
        guardian_name=_text(fields.get("guardian_name")),
        guardian_phone=_text(fields.get("guardian_phone")),
        plan=parse_plan(
            fields.get("plan_mode"),
            fields.get("total_sessions"),
            fields.get("end_date"),
        ),
        notes=_text(fields.get("notes")),
        created_at=created_at,
    )


def merge_profile(profile: StudentProfile, fields: dict[str, Any]) -> StudentProfile:
    """Apply a partial canonical update to a profile."""
    merged = {**profile_to_fields(profile), **fields}
    return build_profile(profile.student_id, merged, created_at=profile.created_at)
