"""Weakness trend series for the student chart.

Lesson logs are bucketed per local calendar day and their tag counts summed.
The series is sparse: days without any tags are left out.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Any

from tutorlog.core.attendance import local_day
from tutorlog.core.records import SessionLog


@dataclass(frozen=True)
class ChartPoint:
    """One day of the series."""

    day: date
    tag_count: int

    @property
    def label(self) -> str:
        """Month/day label for the chart axis, e.g. "3/1"."""
        return f"{self.day.month}/{self.day.day}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "day": self.day.isoformat(),
            "label": self.label,
            "tag_count": self.tag_count,
        }


def chart_series(
    lesson_logs: Iterable[SessionLog],
    tz: tzinfo | None = None,
) -> list[ChartPoint]:
    """Build the per-day tag count series in chronological order.

    Args:
        lesson_logs: Lesson logs, newest first as returned by the store
        tz: Time zone used to find the calendar day (system local if None)

    Returns:
        ChartPoint list, oldest day first, zero-count days omitted
    """
    totals: dict[date, int] = {}
    for log in lesson_logs:
        day = local_day(log.created_at, tz)
        totals[day] = totals.get(day, 0) + len(log.tags)

    return [
        ChartPoint(day=day, tag_count=count)
        for day, count in sorted(totals.items())
        if count > 0
    ]
