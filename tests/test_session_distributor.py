from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.weekly_preview import (
    ERROR_NO_SUBJECTS,
    ERROR_NO_WORKLOAD,
    ERROR_PLACEMENT_IMPOSSIBLE,
    NO_TEACHER,
    WORKING_DAYS,
    Course,
    PreviewError,
    Subject,
    Teacher,
    distribute_course_sessions,
    resolve_teacher,
)


def _columns(grid):
    """Per-day list of subject names, top to bottom."""

    return [
        [row[d].subject_name for row in grid.rows if row[d] is not None]
        for d in range(len(WORKING_DAYS))
    ]


def _max_run(day: list[str]) -> int:
    best = run = 0
    prev = None
    for name in day:
        run = run + 1 if name == prev else 1
        prev = name
        best = max(best, run)
    return best


def test_two_normal_subjects_fill_three_rows() -> None:
    course = Course("C1", "1A", "1A")
    subjects = [Subject("S1", "Math", "1A", 6), Subject("S2", "Spanish", "1A", 5)]
    teachers = [Teacher("T1", "Ana", ("Math", "Spanish"))]

    grid = distribute_course_sessions(course, subjects, teachers, WORKING_DAYS, 8)

    assert grid.row_count == 3
    days = _columns(grid)
    assert sum(len(d) for d in days) == 11
    assert [len(d) for d in days] == [3, 2, 2, 2, 2]
    assert all(_max_run(d) < 3 for d in days)


def test_cells_are_top_aligned() -> None:
    course = Course("C1", "1A", "1A")
    subjects = [Subject("S1", "Math", "1A", 7)]
    grid = distribute_course_sessions(course, subjects, [], WORKING_DAYS, 8)
    for d in range(len(WORKING_DAYS)):
        seen_empty = False
        for row in grid.rows:
            if row[d] is None:
                seen_empty = True
            else:
                assert not seen_empty


def test_session_count_is_conserved() -> None:
    course = Course("C1", "2B", "2B")
    subjects = [
        Subject("S1", "Math", "2B", 5),
        Subject("S2", "Science", "2B", 4),
        Subject("S3", "History", "2B", 3),
        Subject("S4", "Music", "General", 2, kind="Special"),
    ]
    grid = distribute_course_sessions(course, subjects, [], WORKING_DAYS, 6)
    days = _columns(grid)
    assert sum(len(d) for d in days) == 14
    assert all(len(d) <= 6 for d in days)
    for name, expected in [("Math", 5), ("Science", 4), ("History", 3), ("Music", 2)]:
        assert sum(d.count(name) for d in days) == expected


def test_special_subject_never_back_to_back() -> None:
    course = Course("C1", "1A", "1A")
    subjects = [Subject("S1", "Lab", "1A", 5, kind="Special")]
    grid = distribute_course_sessions(course, subjects, [], WORKING_DAYS, 4)
    assert grid.row_count == 1
    assert all(_max_run(d) <= 1 for d in _columns(grid))


def test_general_subject_applies_to_any_level() -> None:
    course = Course("C9", "9Z", "9Z")
    subjects = [Subject("S1", "Art", "general", 2), Subject("S2", "Math", "1A", 3)]
    grid = distribute_course_sessions(course, subjects, [], WORKING_DAYS, 8)
    names = [c.subject_name for row in grid.rows for c in row if c is not None]
    assert names.count("Art") == 2
    assert "Math" not in names


def test_adjacency_relaxed_when_capacity_is_tight() -> None:
    # one day, two slots, one subject: the sweep ignores adjacency
    course = Course("C1", "1A", "1A")
    subjects = [Subject("S1", "Lab", "1A", 2, kind="Special")]
    grid = distribute_course_sessions(course, subjects, [], ("Monday",), 2)
    assert grid.row_count == 2
    assert [row[0].subject_name for row in grid.rows] == ["Lab", "Lab"]


def test_placement_impossible_when_days_are_full() -> None:
    course = Course("C1", "1A", "1A")
    subjects = [Subject("S1", "Math", "1A", 6)]
    with pytest.raises(PreviewError) as exc:
        distribute_course_sessions(course, subjects, [], WORKING_DAYS, 1)
    assert exc.value.kind == ERROR_PLACEMENT_IMPOSSIBLE
    assert "Math" in exc.value.message
    assert "1A" in exc.value.message


def test_no_subjects_for_level() -> None:
    course = Course("C1", "3C", "3C")
    with pytest.raises(PreviewError) as exc:
        distribute_course_sessions(course, [Subject("S1", "Math", "1A", 2)], [], WORKING_DAYS, 8)
    assert exc.value.kind == ERROR_NO_SUBJECTS


def test_zero_workload() -> None:
    course = Course("C1", "1A", "1A")
    with pytest.raises(PreviewError) as exc:
        distribute_course_sessions(course, [Subject("S1", "Math", "1A", 0)], [], WORKING_DAYS, 8)
    assert exc.value.kind == ERROR_NO_WORKLOAD


def test_teacher_resolution_first_match_and_sentinel() -> None:
    teachers = [
        Teacher("T1", "Ana", ("math",)),
        Teacher("T2", "Luis", ("Math", "Science")),
    ]
    assert resolve_teacher(" MATH ", teachers) == "Ana"
    assert resolve_teacher("Science", teachers) == "Luis"
    assert resolve_teacher("Music", teachers) == NO_TEACHER


def test_grid_cells_carry_teacher_and_color() -> None:
    course = Course("C1", "1A", "1A")
    subjects = [Subject("S1", "Math", "1A", 1, color="#ff0000"), Subject("S2", "Music", "1A", 1)]
    teachers = [Teacher("T1", "Ana", ("Math",))]
    grid = distribute_course_sessions(course, subjects, teachers, WORKING_DAYS, 8)
    cells = {c.subject_name: c for row in grid.rows for c in row if c is not None}
    assert cells["Math"].teacher_name == "Ana"
    assert cells["Math"].color == "#ff0000"
    assert cells["Music"].teacher_name == NO_TEACHER


def test_day_cursor_carries_over_between_subjects() -> None:
    course = Course("C1", "1A", "1A")
    subjects = [Subject("S1", "Math", "1A", 3), Subject("S2", "Science", "1A", 3)]
    grid = distribute_course_sessions(course, subjects, [], WORKING_DAYS, 8)
    days = _columns(grid)
    # Science starts on Thursday, where Math stopped
    assert [len(d) for d in days] == [2, 1, 1, 1, 1]
    assert days[0] == ["Math", "Science"]
    assert days[3] == ["Science"]
    assert days[4] == ["Science"]


def test_day_cursor_restarts_for_special_subjects() -> None:
    course = Course("C1", "1A", "1A")
    subjects = [Subject("S1", "Math", "1A", 3), Subject("S2", "Music", "1A", 1, kind="Special")]
    grid = distribute_course_sessions(course, subjects, [], WORKING_DAYS, 8)
    days = _columns(grid)
    assert [len(d) for d in days] == [2, 1, 1, 0, 0]
    assert days[0] == ["Math", "Music"]
