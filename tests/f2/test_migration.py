"""Tests for legacy profile migration (F2)."""

from datetime import date

import pytest

from tutorlog.core.errors import ValidationError
from tutorlog.core.migration import (
    CANONICAL_FIELDS,
    build_profile,
    merge_profile,
    migrate_profile_record,
    needs_migration,
    profile_to_fields,
)
from tutorlog.core.records import PlanMode


class TestMigrateProfileRecord:
    """Tests for migrate_profile_record."""

    def test_v0_goals_and_sessions(self):
        """Plural goals and a bare session count map to a count plan."""
        fields = migrate_profile_record(
            {"id": "abc", "name": "Minji", "goals": "math B", "total_sessions": 8}
        )
        assert fields == {
            "name": "Minji",
            "goal": "math B",
            "total_sessions": 8,
            "plan_mode": "count",
        }

    def test_single_parent(self):
        """parent_* becomes the guardian."""
        fields = migrate_profile_record(
            {"name": "Jiho", "parent_name": "Mrs. Kim", "parent_phone": "010-1111-2222"}
        )
        assert fields["guardian_name"] == "Mrs. Kim"
        assert fields["guardian_phone"] == "010-1111-2222"

    def test_father_and_mother(self):
        """Mother is preferred; the father's contact moves to notes."""
        fields = migrate_profile_record(
            {
                "name": "Seoyeon",
                "father_name": "Dad",
                "father_phone": "010-1111-2222",
                "mother_name": "Mom",
                "mother_phone": "010-3333-4444",
                "memo": "likes geometry",
            }
        )
        assert fields["guardian_name"] == "Mom"
        assert fields["guardian_phone"] == "010-3333-4444"
        assert fields["notes"] == "likes geometry\nfather: Dad 010-1111-2222"

    def test_end_date_only_is_date_plan(self):
        fields = migrate_profile_record({"name": "A", "plan_end_date": "2026-06-30"})
        assert fields["plan_mode"] == "date"
        assert fields["end_date"] == "2026-06-30"

    def test_canonical_key_wins_over_alias(self):
        fields = migrate_profile_record({"name": "A", "goal": "new", "goals": "old"})
        assert fields["goal"] == "new"

    def test_canonical_passthrough(self):
        """A canonical record is unchanged apart from unknown keys."""
        record = {key: "" for key in CANONICAL_FIELDS}
        record.update(name="A", plan_mode="count", total_sessions=4, end_date=None)
        assert not needs_migration(record)
        assert migrate_profile_record({**record, "ui_state": 1}) == record

    def test_needs_migration(self):
        assert needs_migration({"name": "A", "father_name": "Dad"})
        assert not needs_migration({"name": "A", "goal": "x"})


class TestBuildProfile:
    """Tests for building and merging profiles."""

    def test_build(self):
        profile = build_profile(
            3, {"name": "A", "plan_mode": "date", "end_date": "2026-06-30"}
        )
        assert profile.student_id == 3
        assert profile.plan.mode is PlanMode.DATE
        assert profile.plan.end_date == date(2026, 6, 30)

    def test_build_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            build_profile(1, {"name": " "})

    def test_merge_is_partial(self):
        profile = build_profile(1, {"name": "A", "school": "Hana", "total_sessions": 8})
        merged = merge_profile(profile, {"grade": "middle 2"})
        assert merged.school == "Hana"
        assert merged.grade == "middle 2"
        assert merged.plan.total_sessions == 8

    def test_profile_to_fields_round_trip(self):
        profile = build_profile(1, {"name": "A", "goal": "x", "total_sessions": 4})
        assert build_profile(1, profile_to_fields(profile)) == profile
