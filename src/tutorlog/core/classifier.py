"""Split a student's logs into lessons and consultations."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from tutorlog.core.records import LogKind, SessionLog


@dataclass
class ClassifiedLogs:
    """Stable partition of a log list. Both lists keep the input order."""

    lesson_logs: list[SessionLog] = field(default_factory=list)
    consultation_logs: list[SessionLog] = field(default_factory=list)


def split_logs(logs: Iterable[SessionLog]) -> ClassifiedLogs:
    """Partition logs by kind without re-sorting.

    Anything not explicitly a consultation counts as a lesson.
    """
    result = ClassifiedLogs()
    for log in logs:
        if log.kind == LogKind.CONSULTATION:
            result.consultation_logs.append(log)
        else:
            result.lesson_logs.append(log)
    return result
