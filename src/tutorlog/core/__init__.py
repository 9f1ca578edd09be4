"""Core business logic.

Engine (pure functions, no I/O):
- tagging: Keyword weakness tags and aggregate ranking
- classifier: Lesson / consultation split
- attendance: Attended calendar days
- progress: Billing plan progress
- goal_history: Goal-change audit logs
- chart: Per-day weakness trend
- recommendation: Pre-consultation summary and suggestion

Around the engine:
- records, errors: Shared types and error taxonomy
- migration: Legacy profile shapes to the canonical one
- store: Store contract and InMemoryStore
- student_service: Operations orchestrating store calls
"""

__all__ = [
    "tagging",
    "classifier",
    "attendance",
    "progress",
    "goal_history",
    "chart",
    "recommendation",
    "records",
    "errors",
    "migration",
    "store",
    "student_service",
]
