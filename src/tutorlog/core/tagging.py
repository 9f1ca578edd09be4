"""Weakness tag extraction.

Two different algorithms share one keyword table:

- extract_tags: per-log tagging by keyword presence (set semantics)
- rank_weaknesses: aggregate ranking by keyword occurrence counts over all
  of a student's logs, used by the student list

The keyword table is an ordered sequence of KeywordRule. Order matters:
it fixes display order for extract_tags and tie-breaking for
rank_weaknesses.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from tutorlog.core.records import SessionLog


@dataclass(frozen=True)
class KeywordRule:
    """Maps a substring found in log text to a weakness label."""

    keyword: str
    label: str


KeywordTable = Sequence[KeywordRule]


def extract_tags(text: str, keyword_table: KeywordTable) -> list[str]:
    """Tag a single log's text.

    A label is added once if any of its keywords occurs in the text.

    Args:
        text: Free text of the log (may be empty)
        keyword_table: Ordered keyword rules

    Returns:
        Labels in keyword table order, without duplicates
    """
    found: list[str] = []
    if not text:
        return found
    for rule in keyword_table:
        if rule.keyword and rule.keyword in text and rule.label not in found:
            found.append(rule.label)
    return found


def rank_weaknesses(
    logs: Iterable[SessionLog | str],
    keyword_table: KeywordTable,
    limit: int = 3,
) -> list[str]:
    """Rank a student's weakest areas across all of their logs.

    Counts non-overlapping keyword occurrences in the concatenated text and
    sums them per label. Labels are ordered by descending count; ties keep
    the table order of the label's first rule.

    Args:
        logs: SessionLog objects or raw texts
        keyword_table: Ordered keyword rules
        limit: How many labels to return

    Returns:
        Up to `limit` labels, strongest signal first
    """
    texts = [item if isinstance(item, str) else item.text for item in logs]
    all_text = " ".join(t or "" for t in texts)
    if not all_text.strip():
        return []

    first_declared: dict[str, int] = {}
    counts: dict[str, int] = {}
    for index, rule in enumerate(keyword_table):
        first_declared.setdefault(rule.label, index)
        if not rule.keyword:
            continue
        hits = all_text.count(rule.keyword)
        if hits > 0:
            counts[rule.label] = counts.get(rule.label, 0) + hits

    ranked = sorted(
        counts.items(), key=lambda item: (-item[1], first_declared[item[0]])
    )
    return [label for label, _ in ranked[:limit]]
