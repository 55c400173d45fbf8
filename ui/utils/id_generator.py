"""ID generation helpers for the Streamlit UI.

IDs are short and human-friendly:
- Courses: C001, C002, ...
- Subjects: S001, ...
- Teachers: T001, ...
- Cycles: CY01, ...

"""

from __future__ import annotations

import re
import sqlite3


def _next_numeric_suffix(existing: list[str], prefix: str, width: int) -> int:
    # Match e.g. C001
    pat = re.compile(rf"^{re.escape(prefix)}(\d{{{width}}})$")
    nums = []
    for x in existing:
        m = pat.match(x)
        if m:
            nums.append(int(m.group(1)))
    return (max(nums) + 1) if nums else 1


def generate_next_id(conn: sqlite3.Connection, *, table: str, id_column: str, prefix: str, width: int = 3) -> str:
    """Generate next ID by scanning existing rows.

    Fine for a single-user local app (Streamlit).
    """

    cur = conn.execute(f"SELECT {id_column} FROM {table}")
    existing = [r[0] for r in cur.fetchall()]
    n = _next_numeric_suffix(existing, prefix, width)
    return f"{prefix}{n:0{width}d}"


def generate_course_id(conn: sqlite3.Connection) -> str:
    return generate_next_id(conn, table="courses", id_column="course_id", prefix="C", width=3)


def generate_subject_id(conn: sqlite3.Connection) -> str:
    return generate_next_id(conn, table="subjects", id_column="subject_id", prefix="S", width=3)


def generate_teacher_id(conn: sqlite3.Connection) -> str:
    return generate_next_id(conn, table="teachers", id_column="teacher_id", prefix="T", width=3)


def generate_cycle_id(conn: sqlite3.Connection) -> str:
    return generate_next_id(conn, table="cycles", id_column="cycle_id", prefix="CY", width=2)
