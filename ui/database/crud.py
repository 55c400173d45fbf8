"""CRUD operations for the Streamlit UI.

All DB access is centralized here so pages remain clean.

We use simple `sqlite3` + parameterized queries.

"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Sequence


# -----------------
# Helper utilities
# -----------------


def _rows(conn: sqlite3.Connection, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    cur = conn.execute(query, params)
    return [dict(r) for r in cur.fetchall()]


def _row(conn: sqlite3.Connection, query: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
    cur = conn.execute(query, params)
    r = cur.fetchone()
    return dict(r) if r is not None else None


def _next_position(conn: sqlite3.Connection, table: str, id_column: str, record_id: str) -> int:
    # Existing rows keep their position on update.
    r = _row(conn, f"SELECT position FROM {table} WHERE {id_column}=?", (record_id,))
    if r is not None:
        return int(r["position"])
    r = _row(conn, f"SELECT COALESCE(MAX(position), 0) AS p FROM {table}")
    return int(r["p"] if r else 0) + 1


# ---------------------
# Scheduling config
# ---------------------


def get_scheduling_config(conn: sqlite3.Connection) -> Dict[str, Any]:
    s = _row(conn, "SELECT * FROM scheduling_config WHERE id=1")
    assert s is not None
    s["cycles"] = list_cycles(conn)
    return s


def update_scheduling_config(
    conn: sqlite3.Connection,
    *,
    block_duration_minutes: int,
    day_start: str,
    lunch_start: Optional[str],
    lunch_duration_minutes: int,
    school_name: str = "School Scheduler",
) -> None:
    conn.execute(
        """
        UPDATE scheduling_config
        SET school_name=?,
            block_duration_minutes=?,
            day_start=?,
            lunch_start=?,
            lunch_duration_minutes=?,
            updated_at=datetime('now')
        WHERE id=1
        """,
        (
            school_name,
            int(block_duration_minutes),
            day_start,
            lunch_start or None,
            int(lunch_duration_minutes),
        ),
    )


# ------
# Cycles
# ------


def list_cycles(conn: sqlite3.Connection) -> List[Dict[str, Any]]:
    cycles = _rows(conn, "SELECT * FROM cycles ORDER BY cycle_id")
    for c in cycles:
        c["levels"] = [
            x["level"] for x in _rows(conn, "SELECT level FROM cycle_levels WHERE cycle_id=? ORDER BY level", (c["cycle_id"],))
        ]
    return cycles


def upsert_cycle(conn: sqlite3.Connection, *, cycle_id: str, name: str, end_time: str, levels: List[str]) -> None:
    conn.execute(
        """
        INSERT INTO cycles (cycle_id, name, end_time)
        VALUES (?, ?, ?)
        ON CONFLICT(cycle_id) DO UPDATE SET name=excluded.name, end_time=excluded.end_time
        """,
        (cycle_id, name, end_time),
    )

    # refresh levels
    conn.execute("DELETE FROM cycle_levels WHERE cycle_id=?", (cycle_id,))
    for level in levels:
        conn.execute("INSERT OR IGNORE INTO cycle_levels (cycle_id, level) VALUES (?, ?)", (cycle_id, level))


def delete_cycle(conn: sqlite3.Connection, cycle_id: str) -> None:
    conn.execute("DELETE FROM cycles WHERE cycle_id=?", (cycle_id,))


# -------
# Courses
# -------


def list_courses(conn: sqlite3.Connection) -> List[Dict[str, Any]]:
    return _rows(conn, "SELECT * FROM courses ORDER BY level, name")


def upsert_course(conn: sqlite3.Connection, *, course_id: str, name: str, level: str) -> None:
    conn.execute(
        """
        INSERT INTO courses (course_id, name, level)
        VALUES (?, ?, ?)
        ON CONFLICT(course_id) DO UPDATE SET name=excluded.name, level=excluded.level
        """,
        (course_id, name, level),
    )


def delete_course(conn: sqlite3.Connection, course_id: str) -> None:
    conn.execute("DELETE FROM courses WHERE course_id=?", (course_id,))


# --------
# Subjects
# --------


def list_subjects(conn: sqlite3.Connection) -> List[Dict[str, Any]]:
    return _rows(conn, "SELECT * FROM subjects ORDER BY position, subject_id")


def upsert_subject(
    conn: sqlite3.Connection,
    *,
    subject_id: str,
    name: str,
    level: str,
    weekly_blocks: int,
    kind: str = "Normal",
    color: str = "#3b82f6",
) -> None:
    position = _next_position(conn, "subjects", "subject_id", subject_id)
    conn.execute(
        """
        INSERT INTO subjects (subject_id, name, level, weekly_blocks, kind, color, position)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(subject_id) DO UPDATE SET
            name=excluded.name,
            level=excluded.level,
            weekly_blocks=excluded.weekly_blocks,
            kind=excluded.kind,
            color=excluded.color
        """,
        (subject_id, name, level, int(weekly_blocks), str(kind), str(color), position),
    )


def delete_subject(conn: sqlite3.Connection, subject_id: str) -> None:
    conn.execute("DELETE FROM subjects WHERE subject_id=?", (subject_id,))


# --------
# Teachers
# --------


def _teacher_subject_names(conn: sqlite3.Connection, teacher_id: str) -> List[str]:
    return [
        x["subject_name"]
        for x in _rows(conn, "SELECT subject_name FROM teacher_subjects WHERE teacher_id=? ORDER BY subject_name", (teacher_id,))
    ]


def list_teachers(conn: sqlite3.Connection) -> List[Dict[str, Any]]:
    data = _rows(conn, "SELECT * FROM teachers ORDER BY position, teacher_id")
    for r in data:
        r["subject_names"] = _teacher_subject_names(conn, r["teacher_id"])
    return data


def get_teacher(conn: sqlite3.Connection, teacher_id: str) -> Optional[Dict[str, Any]]:
    r = _row(conn, "SELECT * FROM teachers WHERE teacher_id=?", (teacher_id,))
    if r is None:
        return None
    r["subject_names"] = _teacher_subject_names(conn, teacher_id)
    return r


def upsert_teacher(
    conn: sqlite3.Connection,
    *,
    teacher_id: str,
    name: str,
    contract_type: str,
    weekly_hours: int,
    subject_names: List[str],
) -> None:
    position = _next_position(conn, "teachers", "teacher_id", teacher_id)
    conn.execute(
        """
        INSERT INTO teachers (teacher_id, name, contract_type, weekly_hours, position)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(teacher_id) DO UPDATE SET
            name=excluded.name,
            contract_type=excluded.contract_type,
            weekly_hours=excluded.weekly_hours
        """,
        (teacher_id, name, contract_type, int(weekly_hours), position),
    )

    # refresh mappings
    conn.execute("DELETE FROM teacher_subjects WHERE teacher_id=?", (teacher_id,))
    for subject_name in subject_names:
        conn.execute(
            "INSERT OR IGNORE INTO teacher_subjects (teacher_id, subject_name) VALUES (?, ?)",
            (teacher_id, subject_name),
        )


def delete_teacher(conn: sqlite3.Connection, teacher_id: str) -> None:
    conn.execute("DELETE FROM teachers WHERE teacher_id=?", (teacher_id,))
