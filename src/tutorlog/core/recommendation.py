"""Pre-consultation recommendation.

Builds two display strings from a student's logs:

- summary: the most recent consultation, dated and truncated
- suggestion: what to focus on, from the tags of the latest lessons
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any

from tutorlog.core.attendance import local_day
from tutorlog.core.records import SessionLog, StudentProfile

NO_CONSULTATION_MESSAGE = "No consultation recorded yet."
SUGGESTION_TEMPLATE = (
    "Recent lessons flagged: {tags}. Focus the consultation on these areas."
)
GENERIC_SUGGESTION = (
    "No weaknesses flagged in recent lessons. "
    "Discuss goals and satisfaction with the lessons so far."
)

DEFAULT_SUMMARY_MAX_CHARS = 50
DEFAULT_RECENT_LESSON_WINDOW = 5


@dataclass(frozen=True)
class Recommendation:
    summary: str
    suggestion: str
    focus_tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "suggestion": self.suggestion,
            "focus_tags": list(self.focus_tags),
        }


def summarize_consultation(
    consultation_logs: Sequence[SessionLog],
    max_chars: int = DEFAULT_SUMMARY_MAX_CHARS,
    tz: tzinfo | None = None,
) -> str:
    """Format the latest consultation as '<date>: "<text>"'."""
    if not consultation_logs:
        return NO_CONSULTATION_MESSAGE

    # max() keeps the first of equal timestamps, the newest insert
    latest = max(consultation_logs, key=lambda log: log.created_at)
    text = latest.text or ""
    excerpt = text[:max_chars]
    if len(text) > max_chars:
        excerpt += "..."
    day = local_day(latest.created_at, tz)
    return f'{day.isoformat()}: "{excerpt}"'


def recent_focus_tags(
    lesson_logs: Sequence[SessionLog],
    window: int = DEFAULT_RECENT_LESSON_WINDOW,
) -> list[str]:
    """Unique tags of the `window` newest lessons, first-seen order."""
    tags: list[str] = []
    for log in lesson_logs[:window]:
        for tag in log.tags:
            if tag not in tags:
                tags.append(tag)
    return tags


def recommend(
    profile: StudentProfile,
    lesson_logs: Sequence[SessionLog],
    consultation_logs: Sequence[SessionLog],
    max_chars: int = DEFAULT_SUMMARY_MAX_CHARS,
    window: int = DEFAULT_RECENT_LESSON_WINDOW,
    tz: tzinfo | None = None,
) -> Recommendation:
    """Build the summary/suggestion pair shown before a consultation.

    Args:
        profile: Student profile
        lesson_logs: Lesson logs, newest first
        consultation_logs: Consultation logs, newest first
        max_chars: Excerpt length of the consultation summary
        window: Number of recent lessons inspected for tags
        tz: Time zone for the summary date (system local if None)

    Returns:
        Recommendation
    """
    summary = summarize_consultation(consultation_logs, max_chars=max_chars, tz=tz)
    focus = recent_focus_tags(lesson_logs, window=window)

    if focus:
        suggestion = SUGGESTION_TEMPLATE.format(tags=", ".join(focus))
    else:
        suggestion = GENERIC_SUGGESTION

    return Recommendation(summary=summary, suggestion=suggestion, focus_tags=tuple(focus))
