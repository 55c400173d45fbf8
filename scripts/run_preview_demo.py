"""Demo runner: build a weekly schedule preview from in-memory sample data.

Meant for quick validation without the Streamlit UI.

Usage:
    python scripts/run_preview_demo.py

"""

from __future__ import annotations

from pathlib import Path
import logging
import os
import sys

import pandas as pd

# Ensure project root is on PYTHONPATH when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.weekly_preview import (
    Course,
    Cycle,
    PreviewConfig,
    Subject,
    Teacher,
    build_schedule_preview,
)
from utils.timetable_export import df_to_markdown, preview_table_df, subject_totals_df, teacher_workload_df


def sample_inputs():
    config = PreviewConfig(
        block_duration_minutes=45,
        day_start="08:00",
        lunch_start="11:45",
        lunch_duration_minutes=30,
        cycles=(
            Cycle("CY01", "Primary", ("1st", "2nd"), "13:30"),
            Cycle("CY02", "Secondary", ("7th",), "15:00"),
        ),
        school_name="Demo School",
    )
    courses = [
        Course("C001", "1st A", "1st"),
        Course("C002", "2nd A", "2nd"),
        Course("C003", "7th A", "7th"),
    ]
    subjects = [
        Subject("S001", "Math", "1st", 6, color="#ef4444"),
        Subject("S002", "Reading", "1st", 5, color="#22c55e"),
        Subject("S003", "Math", "2nd", 6, color="#ef4444"),
        Subject("S004", "Science", "2nd", 4, color="#14b8a6"),
        Subject("S005", "Algebra", "7th", 6, color="#f59e0b"),
        Subject("S006", "Chemistry", "7th", 4, color="#6366f1"),
        Subject("S007", "Physical Education", "General", 2, kind="Special", color="#a855f7"),
        Subject("S008", "Art", "General", 1, color="#ec4899"),
    ]
    teachers = [
        Teacher("T001", "Ana Lopez", ("Math", "Algebra")),
        Teacher("T002", "Luis Vega", ("Reading", "Science")),
        Teacher("T003", "Marta Ruiz", ("Physical Education",), contract_type="Part-time", weekly_hours=12),
        Teacher("T004", "Sofia Diaz", ("Chemistry",), contract_type="Hourly", weekly_hours=6),
    ]
    return courses, subjects, teachers, config


def main() -> None:
    logging.basicConfig(
        level=os.getenv("SCHOOL_SCHEDULER_LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    courses, subjects, teachers, config = sample_inputs()
    outcome = build_schedule_preview(courses, subjects, teachers, config=config)
    if not outcome.ok:
        print(f"Preview failed: {outcome.error_message}")
        raise SystemExit(1)

    preview = outcome.preview
    days = list(preview.days)

    for table in preview.courses:
        print(f"\n=== Course: {table.name} ===")
        print(df_to_markdown(preview_table_df(table, days)))

    for table in preview.teachers:
        print(f"\n=== Teacher: {table.name} ===")
        print(df_to_markdown(preview_table_df(table, days)))

    print("\n=== Teacher workload ===")
    print(teacher_workload_df(preview).to_string(index=False))

    print("\n=== Subject totals ===")
    print(subject_totals_df(preview).to_string(index=False))

    print("\n=== Summary ===")
    print(
        pd.Series(
            {
                "courses": preview.summary.total_courses,
                "teachers": preview.summary.total_teachers,
                "sessions": preview.summary.total_sessions,
            }
        ).to_string()
    )


if __name__ == "__main__":
    main()
