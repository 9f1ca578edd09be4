"""Tests for the pre-consultation recommendation (F1)."""

from datetime import timezone

from tutorlog.core.records import GOAL_CHANGE_TAG, LogKind, StudentProfile
from tutorlog.core.recommendation import (
    GENERIC_SUGGESTION,
    NO_CONSULTATION_MESSAGE,
    recent_focus_tags,
    recommend,
    summarize_consultation,
)

PROFILE = StudentProfile(student_id=1, name="Seoyeon")


class TestSummary:
    """Tests for the consultation summary."""

    def test_no_consultation(self):
        """No consultations gives the fixed message."""
        assert summarize_consultation([]) == NO_CONSULTATION_MESSAGE

    def test_truncates_long_text(self, make_log, utc):
        """80 characters are cut to 50 plus an ellipsis."""
        text = "x" * 80
        log = make_log(utc(2026, 3, 1), text=text, kind=LogKind.CONSULTATION)

        summary = summarize_consultation([log], tz=timezone.utc)

        assert summary == f'2026-03-01: "{"x" * 50}..."'

    def test_short_text_untouched(self, make_log, utc):
        """Text within the limit has no ellipsis."""
        log = make_log(utc(2026, 3, 1), text="wants harder problems", kind=LogKind.CONSULTATION)
        assert summarize_consultation([log], tz=timezone.utc) == '2026-03-01: "wants harder problems"'

    def test_truncation_boundary(self, make_log, utc):
        """Exactly 50 characters stay whole; 51 are cut with an ellipsis."""
        exact = make_log(utc(2026, 3, 1), text="a" * 50, kind=LogKind.CONSULTATION)
        over = make_log(utc(2026, 3, 1), text="a" * 51, kind=LogKind.CONSULTATION)

        assert summarize_consultation([exact], tz=timezone.utc) == f'2026-03-01: "{"a" * 50}"'
        assert summarize_consultation([over], tz=timezone.utc) == f'2026-03-01: "{"a" * 50}..."'

    def test_uses_most_recent(self, make_log, utc):
        """The latest consultation is summarized."""
        logs = [
            make_log(utc(2026, 3, 1), text="old", kind=LogKind.CONSULTATION),
            make_log(utc(2026, 3, 9), text="new", kind=LogKind.CONSULTATION),
        ]
        assert summarize_consultation(logs, tz=timezone.utc) == '2026-03-09: "new"'


class TestSuggestion:
    """Tests for the focus suggestion."""

    def test_window_of_five(self, make_log, utc):
        """Only the five newest lessons contribute tags."""
        logs = [make_log(utc(2026, 3, 10 - i), tags=(f"t{i}",)) for i in range(7)]
        assert recent_focus_tags(logs) == ["t0", "t1", "t2", "t3", "t4"]

    def test_dedup_first_seen(self, make_log, utc):
        """Tags are unique, in first-seen order."""
        logs = [
            make_log(utc(2026, 3, 3), tags=("speed", "fractions")),
            make_log(utc(2026, 3, 2), tags=("fractions", "careless")),
        ]
        assert recent_focus_tags(logs) == ["speed", "fractions", "careless"]

    def test_goal_change_tag_included(self, make_log, utc):
        """Audit logs in the window contribute their tag like any other."""
        logs = [
            make_log(utc(2026, 3, 3), tags=(GOAL_CHANGE_TAG,)),
            make_log(utc(2026, 3, 2), tags=("speed",)),
        ]
        assert recent_focus_tags(logs) == [GOAL_CHANGE_TAG, "speed"]

    def test_recommend_with_tags(self, make_log, utc):
        """Tags are named in the suggestion."""
        lessons = [make_log(utc(2026, 3, 3), tags=("speed", "fractions"))]
        rec = recommend(PROFILE, lessons, [], tz=timezone.utc)

        assert "speed, fractions" in rec.suggestion
        assert rec.focus_tags == ("speed", "fractions")
        assert rec.summary == NO_CONSULTATION_MESSAGE

    def test_recommend_generic(self, make_log, utc):
        """No tags gives the generic prompt."""
        lessons = [make_log(utc(2026, 3, 3), text="good lesson")]
        rec = recommend(PROFILE, lessons, [], tz=timezone.utc)
        assert rec.suggestion == GENERIC_SUGGESTION
        assert rec.to_dict()["focus_tags"] == []
