from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.weekly_preview import (
    ERROR_INVALID_CONFIG,
    FALLBACK_DAY_BLOCKS,
    Course,
    Cycle,
    PreviewConfig,
    PreviewError,
    Subject,
    compute_course_capacity,
    find_cycle,
    required_weekly_blocks,
)


def test_fallback_capacity_without_cycle() -> None:
    course = Course("C1", "1A", "1A")
    cap = compute_course_capacity(course, PreviewConfig())
    assert cap.max_daily_blocks == FALLBACK_DAY_BLOCKS
    assert cap.weekly_capacity == 40


def test_fallback_capacity_without_lunch() -> None:
    course = Course("C1", "1A", "1A")
    cap = compute_course_capacity(course, PreviewConfig(lunch_start=None, lunch_duration_minutes=0))
    assert cap.max_daily_blocks == FALLBACK_DAY_BLOCKS


def test_cycle_end_one_block_after_start_gives_one_block() -> None:
    cfg = PreviewConfig(
        block_duration_minutes=45,
        day_start="08:00",
        lunch_start="13:00",
        lunch_duration_minutes=60,
        cycles=(Cycle("CY01", "Early", ("1st",), "08:45"),),
    )
    cap = compute_course_capacity(Course("C1", "1st A", "1st"), cfg)
    assert cap.max_daily_blocks == 1
    assert cap.weekly_capacity == 5


def test_cycle_end_before_day_start_still_fits_one_block() -> None:
    cfg = PreviewConfig(cycles=(Cycle("CY01", "Odd", ("1st",), "07:00"),))
    cap = compute_course_capacity(Course("C1", "1st A", "1st"), cfg)
    assert cap.max_daily_blocks == 1


def test_lunch_inside_window_is_deducted() -> None:
    cycles = (Cycle("CY01", "Primary", ("1st",), "15:00"),)
    with_lunch = PreviewConfig(block_duration_minutes=60, lunch_start="12:00", lunch_duration_minutes=60, cycles=cycles)
    no_lunch = PreviewConfig(block_duration_minutes=60, lunch_start=None, lunch_duration_minutes=60, cycles=cycles)
    course = Course("C1", "1st A", "1st")
    assert compute_course_capacity(course, with_lunch).max_daily_blocks == 6
    assert compute_course_capacity(course, no_lunch).max_daily_blocks == 7


def test_capacity_is_monotonic_in_cycle_end() -> None:
    course = Course("C1", "1st A", "1st")
    previous = 0
    for end in ["09:00", "10:00", "12:00", "14:00", "16:00", "18:00"]:
        cfg = PreviewConfig(cycles=(Cycle("CY01", "Primary", ("1st",), end),))
        cap = compute_course_capacity(course, cfg)
        assert cap.max_daily_blocks >= previous
        assert cap.weekly_capacity == cap.max_daily_blocks * 5
        previous = cap.max_daily_blocks


def test_find_cycle_is_case_insensitive_and_first_match_wins() -> None:
    cycles = (
        Cycle("CY01", "Primary", (" 1ST ",), "14:00"),
        Cycle("CY02", "Other", ("1st",), "16:00"),
    )
    assert find_cycle("1st", cycles).cycle_id == "CY01"
    assert find_cycle("9th", cycles) is None


def test_required_blocks_includes_general_subjects() -> None:
    subjects = [
        Subject("S1", "Math", "1A", 4),
        Subject("S2", "Art", "General", 2),
        Subject("S3", "Physics", "2B", 3),
    ]
    assert required_weekly_blocks(Course("C1", "1A", "1A"), subjects) == 6
    assert required_weekly_blocks(Course("C2", "2B", "2B"), subjects) == 5


def test_longer_blocks_never_add_daily_blocks() -> None:
    course = Course("C1", "1st A", "1st")
    cycles = (Cycle("CY01", "Primary", ("1st",), "15:00"),)
    counts = [
        compute_course_capacity(course, PreviewConfig(block_duration_minutes=b, cycles=cycles)).max_daily_blocks
        for b in [30, 45, 50, 60, 90]
    ]
    # 08:00 - 15:00 minus a 60 minute lunch
    assert counts == [12, 8, 7, 6, 4]
    assert all(a >= b for a, b in zip(counts, counts[1:]))


def test_non_positive_block_is_rejected() -> None:
    with pytest.raises(PreviewError) as exc:
        compute_course_capacity(Course("C1", "1A", "1A"), PreviewConfig(block_duration_minutes=0))
    assert exc.value.kind == ERROR_INVALID_CONFIG
