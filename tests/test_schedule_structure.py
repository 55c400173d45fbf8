from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.weekly_preview import PreviewConfig, build_schedule_structure


def _layout(rows):
    return [(r.kind, r.time) for r in rows]


def test_lunch_inserted_at_its_block_index() -> None:
    cfg = PreviewConfig(block_duration_minutes=60, day_start="08:00", lunch_start="10:00", lunch_duration_minutes=30)
    rows = build_schedule_structure(4, cfg)
    assert _layout(rows) == [
        ("class", "08:00 - 09:00"),
        ("class", "09:00 - 10:00"),
        ("lunch", "10:00 - 10:30"),
        ("class", "10:30 - 11:30"),
        ("class", "11:30 - 12:30"),
    ]
    assert [r.class_index for r in rows if r.kind == "class"] == [0, 1, 2, 3]


def test_lunch_after_last_class_row_is_appended() -> None:
    rows = build_schedule_structure(3, PreviewConfig())
    assert _layout(rows) == [
        ("class", "08:00 - 08:45"),
        ("class", "08:45 - 09:30"),
        ("class", "09:30 - 10:15"),
        ("lunch", "13:00 - 14:00"),
    ]


def test_lunch_before_day_start_is_appended_at_the_end() -> None:
    cfg = PreviewConfig(block_duration_minutes=60, day_start="08:00", lunch_start="07:00", lunch_duration_minutes=60)
    rows = build_schedule_structure(2, cfg)
    assert [r.kind for r in rows] == ["class", "class", "lunch"]
    assert rows[-1].time == "10:00 - 11:00"


def test_no_lunch_configured() -> None:
    cfg = PreviewConfig(lunch_start=None)
    rows = build_schedule_structure(2, cfg)
    assert [r.kind for r in rows] == ["class", "class"]

    zero = PreviewConfig(lunch_start="10:00", lunch_duration_minutes=0)
    assert all(r.kind == "class" for r in build_schedule_structure(5, zero))


def test_lunch_start_mid_block_shows_real_start() -> None:
    # 09:50 falls inside class index 2 (09:30 - 10:15)
    cfg = PreviewConfig(block_duration_minutes=45, day_start="08:00", lunch_start="09:50", lunch_duration_minutes=30)
    rows = build_schedule_structure(4, cfg)
    assert [r.kind for r in rows] == ["class", "class", "lunch", "class", "class"]
    assert rows[2].time == "09:50 - 10:20"
    # the clock advances by the lunch duration only
    assert rows[3].time == "10:00 - 10:45"


def test_exactly_one_lunch_row() -> None:
    for n in range(0, 12):
        rows = build_schedule_structure(n, PreviewConfig())
        assert sum(1 for r in rows if r.kind == "lunch") == 1
        assert sum(1 for r in rows if r.kind == "class") == n
