from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.weekly_preview import (
    ERROR_CAPACITY_EXCEEDED,
    ERROR_COURSE_NOT_FOUND,
    ERROR_EMPTY_INPUT,
    ERROR_INVALID_CONFIG,
    ERROR_NO_SUBJECTS,
    MODE_COURSE,
    NO_TEACHER,
    WORKING_DAYS,
    Course,
    Cycle,
    PreviewConfig,
    Subject,
    Teacher,
    build_schedule_preview,
)


def _sample():
    # no teacher serves two courses, so teacher grids never overlap
    courses = [Course("C1", "1st A", "1st"), Course("C2", "2nd A", "2nd")]
    subjects = [
        Subject("S1", "Math", "1st", 5, color="#ef4444"),
        Subject("S2", "Reading", "1st", 4),
        Subject("S3", "Algebra", "2nd", 6, color="#ef4444"),
        Subject("S4", "Science", "2nd", 3),
        Subject("S5", "Music", "1st", 2, kind="Special", color="#a855f7"),
        Subject("S6", "Art", "General", 1),
    ]
    teachers = [
        Teacher("T1", "Ana", ("Math",)),
        Teacher("T2", "Luis", ("Reading",)),
        Teacher("T3", "Marta", ("Music",)),
        Teacher("T4", "Pedro", ("Algebra",)),
        Teacher("T5", "Sofia", ("Science",)),
    ]
    config = PreviewConfig(
        cycles=(Cycle("CY01", "Primary", ("1st", "2nd"), "14:00"),),
        school_name="Test School",
    )
    return courses, subjects, teachers, config


def test_full_preview_builds_every_course() -> None:
    courses, subjects, teachers, config = _sample()
    outcome = build_schedule_preview(courses, subjects, teachers, config=config)

    assert outcome.ok
    assert outcome.error is None
    preview = outcome.preview
    assert preview.days == WORKING_DAYS
    assert [t.table_id for t in preview.courses] == ["C1", "C2"]
    # 1st: 5 + 4 + 2 + 1, 2nd: 6 + 3 + 1
    assert preview.summary.total_sessions == 22
    assert preview.summary.total_courses == 2
    assert preview.school_name == "Test School"
    assert preview.config["block_duration_minutes"] == 45


def test_every_table_shares_the_same_rows() -> None:
    courses, subjects, teachers, config = _sample()
    preview = build_schedule_preview(courses, subjects, teachers, config=config).preview

    times = [[r.time for r in t.rows] for t in list(preview.courses) + list(preview.teachers)]
    assert all(t == times[0] for t in times)
    for table in list(preview.courses) + list(preview.teachers):
        lunch_rows = [r for r in table.rows if r.kind == "lunch"]
        assert len(lunch_rows) == 1
        assert all(c is not None and c.kind == "lunch" for c in lunch_rows[0].cells)


def test_teacher_tables_cover_every_assigned_session() -> None:
    courses, subjects, teachers, config = _sample()
    preview = build_schedule_preview(courses, subjects, teachers, config=config).preview

    assigned = 0
    for table in preview.courses:
        for row in table.rows:
            if row.kind != "class":
                continue
            for cell in row.cells:
                if cell is not None and cell.teacher != NO_TEACHER:
                    assigned += 1
    in_teacher_tables = sum(
        1 for t in preview.teachers for row in t.rows if row.kind == "class" for c in row.cells if c is not None
    )
    assert assigned == in_teacher_tables
    # Art has no teacher
    assert {t.name for t in preview.teachers} == {"Ana", "Luis", "Marta", "Pedro", "Sofia"}
    assert preview.summary.total_teachers == 5


def test_supplementary_totals() -> None:
    courses, subjects, teachers, config = _sample()
    preview = build_schedule_preview(courses, subjects, teachers, config=config).preview

    totals = {t.subject_name: t.minutes for t in preview.subject_totals}
    assert totals["Math"] == 5 * 45
    assert totals["Algebra"] == 6 * 45
    assert totals["Music"] == 2 * 45

    by_teacher = {s.teacher_name: s for s in preview.teacher_summaries}
    assert by_teacher["Ana"].class_minutes == 5 * 45
    assert dict(by_teacher["Luis"].subject_minutes) == {"Reading": 4 * 45}
    assert [t.color for t in preview.teacher_tags][:2] == ["hsl(0 70% 45%)", "hsl(67 70% 45%)"]


def test_course_mode_returns_one_course() -> None:
    courses, subjects, teachers, config = _sample()
    outcome = build_schedule_preview(courses, subjects, teachers, mode=MODE_COURSE, course_id="C2", config=config)
    assert outcome.ok
    assert [t.table_id for t in outcome.preview.courses] == ["C2"]
    assert outcome.preview.summary.total_courses == 1


def test_course_mode_unknown_course() -> None:
    courses, subjects, teachers, config = _sample()
    outcome = build_schedule_preview(courses, subjects, teachers, mode=MODE_COURSE, course_id="C99", config=config)
    assert not outcome.ok
    assert outcome.preview is None
    assert outcome.error.kind == ERROR_COURSE_NOT_FOUND
    assert "C99" in outcome.error_message


def test_capacity_exceeded_names_course_and_numbers() -> None:
    courses = [Course("C1", "1A", "1A")]
    subjects = [Subject("S1", "Math", "1A", 25), Subject("S2", "Reading", "1A", 20)]
    teachers = [Teacher("T1", "Ana", ("Math",))]
    outcome = build_schedule_preview(courses, subjects, teachers)
    assert outcome.error.kind == ERROR_CAPACITY_EXCEEDED
    msg = outcome.error_message
    assert "1A" in msg and "40" in msg and "45" in msg


def test_no_teachers_fails_before_placement() -> None:
    courses, subjects, _, config = _sample()
    outcome = build_schedule_preview(courses, subjects, [], config=config)
    assert outcome.error.kind == ERROR_EMPTY_INPUT
    assert "teachers" in outcome.error_message


def test_no_courses_or_subjects() -> None:
    _, subjects, teachers, _ = _sample()
    assert build_schedule_preview([], subjects, teachers).error.kind == ERROR_EMPTY_INPUT
    assert build_schedule_preview([Course("C1", "1A", "1A")], [], teachers).error.kind == ERROR_EMPTY_INPUT


def test_first_failing_course_aborts_the_whole_preview() -> None:
    courses, subjects, teachers, config = _sample()
    courses = courses + [Course("C3", "9th A", "9th")]
    # General subjects still apply; drop them so 9th has nothing
    subjects = [s for s in subjects if s.level != "General"]
    outcome = build_schedule_preview(courses, subjects, teachers, config=config)
    assert outcome.preview is None
    assert outcome.error.kind == ERROR_NO_SUBJECTS


def test_preview_is_deterministic() -> None:
    courses, subjects, teachers, config = _sample()
    first = build_schedule_preview(courses, subjects, teachers, config=config)
    second = build_schedule_preview(courses, subjects, teachers, config=config)
    assert first == second


def test_zero_block_duration_is_reported_not_raised() -> None:
    courses, subjects, teachers, _ = _sample()
    outcome = build_schedule_preview(courses, subjects, teachers, config=PreviewConfig(block_duration_minutes=0))
    assert not outcome.ok
    assert outcome.error.kind == ERROR_INVALID_CONFIG
