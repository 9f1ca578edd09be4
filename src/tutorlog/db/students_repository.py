"""Repository functions for the students table.

All functions take an open connection so that callers can group several
statements into one transaction (see tutorlog.db.database.get_db).
"""

from __future__ import annotations

import sqlite3
from datetime import datetime

import structlog

from tutorlog.core.records import BillingPlan, PlanMode, StudentProfile
from tutorlog.utils.validators import parse_date

logger = structlog.get_logger(__name__)


def insert_student(
    conn: sqlite3.Connection,
    profile: StudentProfile,
    created_at: str,
) -> int:
    """Insert a new student row.

    Args:
        conn: Open connection
        profile: Validated profile (student_id is ignored)
        created_at: ISO timestamp assigned by the store

    Returns:
        The new student_id
    """
    cursor = conn.execute(
        """
        INSERT INTO students (
            name, school, grade, goal,
            student_phone, guardian_name, guardian_phone,
            plan_mode, total_sessions, end_date,
            notes, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            profile.name,
            profile.school,
            profile.grade,
            profile.goal,
            profile.student_phone,
            profile.guardian_name,
            profile.guardian_phone,
            profile.plan.mode.value,
            profile.plan.total_sessions,
            profile.plan.end_date.isoformat() if profile.plan.end_date else None,
            profile.notes,
            created_at,
        ),
    )
    student_id = cursor.lastrowid
    logger.debug("students.inserted", student_id=student_id)
    return student_id


def get_student_by_id(conn: sqlite3.Connection, student_id: int) -> StudentProfile | None:
    """Get student by ID.

    Returns:
        StudentProfile if found, None otherwise
    """
    row = conn.execute(
        "SELECT * FROM students WHERE student_id = ?", (student_id,)
    ).fetchone()

    if row is None:
        return None

    return _row_to_profile(row)


def get_all_students(conn: sqlite3.Connection) -> list[StudentProfile]:
    """Get all students, most recently registered first."""
    rows = conn.execute(
        "SELECT * FROM students ORDER BY created_at DESC, student_id DESC"
    ).fetchall()

    return [_row_to_profile(row) for row in rows]


def update_student(conn: sqlite3.Connection, profile: StudentProfile) -> bool:
    """Overwrite a student's editable columns.

    Returns:
        True if a row was updated
    """
    cursor = conn.execute(
        """
        UPDATE students SET
            name = ?, school = ?, grade = ?, goal = ?,
            student_phone = ?, guardian_name = ?, guardian_phone = ?,
            plan_mode = ?, total_sessions = ?, end_date = ?,
            notes = ?
        WHERE student_id = ?
        """,
        (
            profile.name,
            profile.school,
            profile.grade,
            profile.goal,
            profile.student_phone,
            profile.guardian_name,
            profile.guardian_phone,
            profile.plan.mode.value,
            profile.plan.total_sessions,
            profile.plan.end_date.isoformat() if profile.plan.end_date else None,
            profile.notes,
            profile.student_id,
        ),
    )
    logger.debug("students.updated", student_id=profile.student_id)
    return cursor.rowcount > 0


def delete_student(conn: sqlite3.Connection, student_id: int) -> bool:
    """Delete a student. Logs go with it (ON DELETE CASCADE).

    Returns:
        True if a row was deleted
    """
    cursor = conn.execute("DELETE FROM students WHERE student_id = ?", (student_id,))
    logger.debug("students.deleted", student_id=student_id)
    return cursor.rowcount > 0


def _row_to_profile(row: sqlite3.Row) -> StudentProfile:
    """Convert database row to StudentProfile."""
    return StudentProfile(
        student_id=row["student_id"],
        name=row["name"],
        school=row["school"],
        grade=row["grade"],
        goal=row["goal"],
        student_phone=row["student_phone"],
        guardian_name=row["guardian_name"],
        guardian_phone=row["guardian_phone"],
        plan=BillingPlan(
            mode=PlanMode(row["plan_mode"]),
            total_sessions=row["total_sessions"],
            end_date=parse_date(row["end_date"]),
        ),
        notes=row["notes"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )
