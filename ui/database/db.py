"""SQLite database connection + schema initialization.

Master data for the schedule preview lives here:
- courses, subjects, teachers (+ the subject names each teacher covers)
- cycles (level groupings with a common day end) and their levels
- the scheduling configuration singleton (block length, day start, lunch)

The Streamlit UI imports this module; the preview engine never does.

"""

from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_DB_FILENAME = "scheduler.db"


@dataclass(frozen=True)
class DBConfig:
    """Database configuration for the app."""

    db_path: Path


def default_db_path() -> Path:
    """Resolve DB path.

    Uses `SCHOOL_SCHEDULER_DB` env var if set, else stores under `ui/database/`.
    """

    override = os.getenv("SCHOOL_SCHEDULER_DB")
    if override:
        return Path(override).expanduser().resolve()

    return (Path(__file__).resolve().parent / DEFAULT_DB_FILENAME).resolve()


def get_connection(config: Optional[DBConfig] = None) -> sqlite3.Connection:
    """Create a SQLite connection with sane defaults."""

    db_path = (config.db_path if config else default_db_path())
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row

    # Ensure FK constraints are enforced
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Create all required tables if they do not exist."""

    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS scheduling_config (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            school_name TEXT NOT NULL DEFAULT 'School Scheduler',
            block_duration_minutes INTEGER NOT NULL DEFAULT 45 CHECK (block_duration_minutes BETWEEN 5 AND 240),
            day_start TEXT NOT NULL DEFAULT '08:00',
            lunch_start TEXT DEFAULT '13:00',
            lunch_duration_minutes INTEGER NOT NULL DEFAULT 60 CHECK (lunch_duration_minutes BETWEEN 0 AND 240),
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        INSERT OR IGNORE INTO scheduling_config (id) VALUES (1);

        CREATE TABLE IF NOT EXISTS cycles (
            cycle_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            end_time TEXT NOT NULL
        );

        -- one row per level label grouped under a cycle
        CREATE TABLE IF NOT EXISTS cycle_levels (
            cycle_id TEXT NOT NULL,
            level TEXT NOT NULL,
            PRIMARY KEY (cycle_id, level),
            FOREIGN KEY (cycle_id) REFERENCES cycles(cycle_id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS courses (
            course_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            level TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS subjects (
            subject_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            level TEXT NOT NULL,
            weekly_blocks INTEGER NOT NULL CHECK (weekly_blocks BETWEEN 1 AND 40),
            kind TEXT NOT NULL DEFAULT 'Normal' CHECK (kind IN ('Normal','Special')),
            color TEXT NOT NULL DEFAULT '#3b82f6',
            -- insertion order is the placement order
            position INTEGER NOT NULL DEFAULT 0
        );

        CREATE TABLE IF NOT EXISTS teachers (
            teacher_id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            contract_type TEXT NOT NULL DEFAULT 'Full-time' CHECK (contract_type IN ('Full-time','Part-time','Hourly')),
            weekly_hours INTEGER NOT NULL DEFAULT 0 CHECK (weekly_hours BETWEEN 0 AND 60),
            position INTEGER NOT NULL DEFAULT 0
        );

        -- teachers are matched to subjects by name, not by id
        CREATE TABLE IF NOT EXISTS teacher_subjects (
            teacher_id TEXT NOT NULL,
            subject_name TEXT NOT NULL,
            PRIMARY KEY (teacher_id, subject_name),
            FOREIGN KEY (teacher_id) REFERENCES teachers(teacher_id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_courses_level ON courses(level);
        CREATE INDEX IF NOT EXISTS idx_subjects_level ON subjects(level);
        """
    )

    conn.commit()


class db_session:
    """Context manager that opens a connection and ensures schema exists."""

    def __init__(self, config: Optional[DBConfig] = None):
        self._config = config
        self._conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> sqlite3.Connection:
        self._conn = get_connection(self._config)
        init_db(self._conn)
        return self._conn

    def __exit__(self, exc_type, exc, tb) -> None:
        assert self._conn is not None
        if exc_type is None:
            self._conn.commit()
        else:
            self._conn.rollback()
        self._conn.close()
        self._conn = None
