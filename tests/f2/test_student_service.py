"""Tests for StudentService operations (F2)."""

from datetime import timezone

import pytest

from tutorlog.core.errors import (
    GoalAuditError,
    NotFoundError,
    SessionCapReachedError,
    StoreError,
    ValidationError,
)
from tutorlog.core.records import GOAL_CHANGE_TAG, LogKind, PlanMode
from tutorlog.core.recommendation import NO_CONSULTATION_MESSAGE
from tutorlog.core.store import InMemoryStore
from tutorlog.core.student_service import StudentService


class TestRegisterStudent:
    """Tests for register_student."""

    def test_count_plan_gets_default_total(self, service):
        profile = service.register_student("Minji")
        assert profile.plan.mode is PlanMode.COUNT
        assert profile.plan.total_sessions == 8

    def test_explicit_total(self, service):
        profile = service.register_student("Minji", total_sessions=12)
        assert profile.plan.total_sessions == 12

    def test_date_plan(self, service):
        profile = service.register_student("Minji", plan_mode="date", end_date="2026-06-30")
        assert profile.plan.mode is PlanMode.DATE
        assert profile.plan.end_date.isoformat() == "2026-06-30"

    def test_blank_name_rejected_before_store(self, service):
        with pytest.raises(ValidationError):
            service.register_student("  ")
        assert service.store.list_students() == []

    def test_date_plan_without_end_date(self, service):
        with pytest.raises(ValidationError):
            service.register_student("Minji", plan_mode="date")
        assert service.store.list_students() == []

    def test_bad_phone(self, service):
        with pytest.raises(ValidationError) as exc:
            service.register_student("Minji", guardian_phone="call mom")
        assert exc.value.field == "guardian_phone"


class TestListStudents:
    """Tests for list_students."""

    def test_top_weaknesses(self, service):
        student = service.register_student("Minji")
        service.save_log(student.student_id, "제곱근 계산 실수")
        service.save_log(student.student_id, "제곱근 다시, 분수 연습")

        summary = service.list_students()[0]

        assert summary.top_weaknesses[0] == "제곱근"
        assert set(summary.top_weaknesses) == {"제곱근", "단순실수", "분수"}

    def test_goal_change_logs_ranked(self, service):
        """Audit log text is part of the student's full log text."""
        student = service.register_student("Minji", goal="분수")
        service.update_profile(student.student_id, {"goal": "제곱근"})

        assert service.list_students()[0].top_weaknesses == ["제곱근", "분수"]

    def test_lesson_kind_goal_change_in_focus_tags(self, service):
        """A lesson-kind audit log feeds the suggestion window."""
        student = service.register_student("Minji", goal="a")
        service.update_profile(student.student_id, {"goal": "b"}, goal_change_kind=LogKind.LESSON)

        dash = service.load_dashboard(student.student_id)

        assert dash.recommendation.focus_tags == (GOAL_CHANGE_TAG,)

    def test_search(self, service):
        service.register_student("Minji", school="Hana Middle")
        service.register_student("Jiho", school="Dure High")

        assert [s.profile.name for s in service.list_students(search="Hana")] == ["Minji"]
        assert [s.profile.name for s in service.list_students(search="Ji")] == ["Jiho"]
        assert len(service.list_students()) == 2


class TestSaveLog:
    """Tests for save_log."""

    def test_tags_assigned_at_write(self, service):
        student = service.register_student("Minji")
        log = service.save_log(student.student_id, "분수 계산이 느림")
        assert log.tags == ("분수", "연산속도")
        assert log.kind is LogKind.LESSON

    def test_needs_text_or_image(self, service):
        student = service.register_student("Minji")
        with pytest.raises(ValidationError):
            service.save_log(student.student_id, "   ")

        log = service.save_log(student.student_id, "", image="photos/worksheet.jpg")
        assert log.image == "photos/worksheet.jpg"
        assert log.tags == ()

    def test_unknown_kind(self, service):
        student = service.register_student("Minji")
        with pytest.raises(ValidationError):
            service.save_log(student.student_id, "x", kind="homework")

    def test_unknown_student(self, service):
        with pytest.raises(NotFoundError):
            service.save_log(999, "x")

    def test_cap_confirmation_scenario(self, service):
        """total=2: third lesson needs confirmation, then current=3, remaining=-1."""
        student = service.register_student("Minji", total_sessions=2)
        sid = student.student_id
        service.save_log(sid, "lesson 1")
        service.save_log(sid, "lesson 2")

        progress = service.load_dashboard(sid).progress
        assert progress.exhausted is True

        with pytest.raises(SessionCapReachedError) as exc:
            service.save_log(sid, "lesson 3")
        assert exc.value.progress.current == 2
        assert len(service.store.list_logs(sid)) == 2

        service.save_log(sid, "lesson 3", confirm=True)

        progress = service.load_dashboard(sid).progress
        assert progress.current == 3
        assert progress.remaining == -1

    def test_consultation_ignores_cap(self, service):
        student = service.register_student("Minji", total_sessions=1)
        service.save_log(student.student_id, "lesson")
        log = service.save_log(student.student_id, "parent call", kind="consultation")
        assert log.kind is LogKind.CONSULTATION

    def test_no_cap_with_zero_total(self, service):
        student = service.register_student("Minji", total_sessions=0)
        for i in range(3):
            service.save_log(student.student_id, f"lesson {i}")
        assert service.load_dashboard(student.student_id).progress.exhausted is False

    def test_delete_log(self, service):
        student = service.register_student("Minji")
        log = service.save_log(student.student_id, "x")
        service.delete_log(log.log_id)
        assert service.store.list_logs(student.student_id) == []


class TestUpdateProfile:
    """Tests for update_profile and goal history."""

    def test_goal_change_writes_audit_log(self, service):
        student = service.register_student("Minji", goal="fractions")

        result = service.update_profile(student.student_id, {"goal": "functions"})

        assert result.goal_changed
        assert result.profile.goal == "functions"
        logs = service.store.list_logs(student.student_id)
        assert len(logs) == 1
        assert logs[0].text == "goal changed: fractions -> functions"
        assert logs[0].tags == (GOAL_CHANGE_TAG,)
        assert logs[0].kind is LogKind.CONSULTATION
        assert logs[0].log_id == result.audit_log_id

    def test_same_goal_no_audit_log(self, service):
        student = service.register_student("Minji", goal="fractions")
        result = service.update_profile(student.student_id, {"goal": "fractions"})
        assert not result.goal_changed
        assert service.store.list_logs(student.student_id) == []

    def test_goal_change_kind_override(self, service):
        student = service.register_student("Minji", goal="a")
        service.update_profile(student.student_id, {"goal": "b"}, goal_change_kind=LogKind.LESSON)
        assert service.store.list_logs(student.student_id)[0].kind is LogKind.LESSON

    def test_other_fields(self, service):
        student = service.register_student("Minji")
        result = service.update_profile(student.student_id, {"school": "Hana", "total_sessions": 4})
        assert result.profile.school == "Hana"
        assert result.profile.plan.total_sessions == 4
        assert not result.goal_changed

    def test_unknown_field(self, service):
        student = service.register_student("Minji")
        with pytest.raises(ValidationError):
            service.update_profile(student.student_id, {"favourite_colour": "blue"})

    def test_invalid_plan_changes_nothing(self, service):
        student = service.register_student("Minji", goal="a")
        with pytest.raises(ValidationError):
            service.update_profile(student.student_id, {"goal": "b", "plan_mode": "date"})
        assert service.store.get_student(student.student_id).goal == "a"
        assert service.store.list_logs(student.student_id) == []

    def test_delete_student(self, service):
        student = service.register_student("Minji")
        service.save_log(student.student_id, "x")
        service.delete_student(student.student_id)
        with pytest.raises(NotFoundError):
            service.load_dashboard(student.student_id)


class FailingLogStore(InMemoryStore):
    """Store whose log inserts fail."""

    def insert_log(self, log):
        raise StoreError("log table unavailable")


class FailingUpdateStore(InMemoryStore):
    """Store whose profile updates fail."""

    def update_student(self, student_id, fields):
        raise StoreError("profile table unavailable")


class TestDualWriteWindow:
    """The non-transactional base update_student_with_log."""

    def test_audit_failure_does_not_block_profile_update(self, config):
        store = FailingLogStore()
        service = StudentService(store, config)
        student = service.register_student("Minji", goal="a")

        with pytest.raises(GoalAuditError) as exc:
            service.update_profile(student.student_id, {"goal": "b"})

        assert exc.value.student_id == student.student_id
        assert store.get_student(student.student_id).goal == "b"

    def test_profile_failure_leaves_orphan_log(self, config):
        """Known limitation: the audit log survives a failed profile update."""
        store = FailingUpdateStore()
        service = StudentService(store, config)
        student = service.register_student("Minji", goal="a")

        with pytest.raises(StoreError) as exc:
            service.update_profile(student.student_id, {"goal": "b"})

        assert not isinstance(exc.value, GoalAuditError)
        assert store.get_student(student.student_id).goal == "a"
        assert store.list_logs(student.student_id)[0].text == "goal changed: a -> b"


class TestImportRecords:
    """Tests for import_records."""

    def test_mixed_generations(self, service):
        ids = service.import_records(
            [
                {"name": "Minji", "goals": "math", "total_sessions": 8},
                {"name": "Jiho", "father_name": "Dad", "mother_name": "Mom"},
                {"name": "Seoyeon", "goal": "english", "plan_mode": "date", "end_date": "2026-06-30"},
            ]
        )
        assert len(ids) == 3
        assert service.store.get_student(ids[0]).goal == "math"
        assert service.store.get_student(ids[1]).guardian_name == "Mom"
        assert service.store.get_student(ids[2]).plan.mode is PlanMode.DATE

    def test_non_mapping_record_rejected(self, service):
        """Records must be objects; nothing is inserted otherwise."""
        with pytest.raises(ValidationError):
            service.import_records([{"name": "Jiho"}, "Minji"])
        with pytest.raises(ValidationError):
            service.import_records("Minji")
        assert service.store.list_students() == []

    def test_invalid_record_imports_nothing(self, service):
        with pytest.raises(ValidationError):
            service.import_records([{"name": "Minji"}, {"goals": "no name"}])
        assert service.store.list_students() == []


class TestLoadDashboard:
    """Tests for load_dashboard."""

    def test_dashboard(self, service):
        student = service.register_student("Minji", goal="fractions", total_sessions=8)
        sid = student.student_id
        service.save_log(sid, "분수 실수")
        service.save_log(sid, "역수 헷갈림")
        service.save_log(sid, "wants more homework", kind=LogKind.CONSULTATION)

        dash = service.load_dashboard(sid, tz=timezone.utc)

        assert len(dash.logs) == 3
        assert len(dash.lesson_logs) == 2
        assert len(dash.consultation_logs) == 1
        assert dash.progress.current == 2
        assert dash.progress.remaining == 6
        assert [d.isoformat() for d in dash.attended_days] == ["2026-03-01"]
        assert dash.is_attended(dash.attended_days[0])
        assert [(p.label, p.tag_count) for p in dash.chart] == [("3/1", 4)]
        assert dash.recommendation.summary == '2026-03-01: "wants more homework"'
        assert dash.recommendation.focus_tags == ("역수", "개념혼동", "분수", "단순실수")

        data = dash.to_dict()
        assert data["lesson_count"] == 2
        assert data["consultation_count"] == 1

    def test_empty_dashboard(self, service):
        student = service.register_student("Minji")
        dash = service.load_dashboard(student.student_id, tz=timezone.utc)
        assert dash.logs == []
        assert dash.chart == []
        assert dash.recommendation.summary == NO_CONSULTATION_MESSAGE
        assert dash.progress.current == 0
