"""Weekly schedule preview engine.

This module turns the school's master data (courses, subjects, teachers) and the
scheduling configuration into a weekly preview: one timetable per course plus
one per teacher, with a few summary counts for the dashboard.

It is a greedy heuristic, not an optimizer:
- capacity per course comes from its cycle's end time (or a fixed estimate)
- sessions are dealt day by day with a day cursor shared between subjects
- a bounded attempt budget guarantees termination, then a capacity-only sweep
  places whatever is left

Placement rules
---------------
- "Normal" subjects may not have 3 sessions in a row on the same day
- "Special" subjects may not have 2 sessions in a row on the same day
- a day never holds more than `max_daily_blocks` sessions

The entry point is `build_schedule_preview`, which returns a `PreviewOutcome`
holding either the full `SchedulePreview` or a single `PreviewError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import logging


logger = logging.getLogger(__name__)


WORKING_DAYS: Tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

NO_TEACHER = "No teacher assigned"
LUNCH_LABEL = "Lunch"
LUNCH_COLOR = "#f97316"
GENERAL_LEVEL = "general"

SUBJECT_NORMAL = "Normal"
SUBJECT_SPECIAL = "Special"

MODE_FULL = "full"
MODE_COURSE = "course"

MAX_PLACEMENT_ATTEMPTS = 1000
# Estimated class blocks in a day for levels without a cycle.
FALLBACK_DAY_BLOCKS = 8

# Error kinds
ERROR_EMPTY_INPUT = "empty_input"
ERROR_COURSE_NOT_FOUND = "course_not_found"
ERROR_CAPACITY_EXCEEDED = "capacity_exceeded"
ERROR_NO_SUBJECTS = "no_subjects"
ERROR_NO_WORKLOAD = "no_workload"
ERROR_PLACEMENT_IMPOSSIBLE = "placement_impossible"
ERROR_EMPTY_RESULT = "empty_result"
ERROR_INVALID_CONFIG = "invalid_config"


class PreviewError(ValueError):
    """A business-rule failure while generating a preview."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


# ----------------------------
# Data models
# ----------------------------


@dataclass(frozen=True)
class Course:
    course_id: str
    name: str
    level: str


@dataclass(frozen=True)
class Subject:
    subject_id: str
    name: str
    level: str
    weekly_blocks: int
    kind: str = SUBJECT_NORMAL  # Normal | Special
    color: str = "#3b82f6"


@dataclass(frozen=True)
class Teacher:
    teacher_id: str
    name: str
    subject_names: Tuple[str, ...]
    contract_type: str = "Full-time"
    weekly_hours: int = 0


@dataclass(frozen=True)
class Cycle:
    cycle_id: str
    name: str
    levels: Tuple[str, ...]
    end_time: str


@dataclass(frozen=True)
class PreviewConfig:
    block_duration_minutes: int = 45
    day_start: str = "08:00"
    # None (or "") disables the lunch window.
    lunch_start: Optional[str] = "13:00"
    lunch_duration_minutes: int = 60
    cycles: Tuple[Cycle, ...] = ()
    school_name: str = "School Scheduler"

    @property
    def has_lunch(self) -> bool:
        return bool(self.lunch_start) and int(self.lunch_duration_minutes) > 0


@dataclass(frozen=True)
class CourseCapacity:
    max_daily_blocks: int
    weekly_capacity: int


@dataclass(frozen=True)
class SlotCell:
    subject_name: str
    teacher_name: str
    color: str


@dataclass(frozen=True)
class CourseGrid:
    course: Course
    # rows[row_idx][day_idx]
    rows: Tuple[Tuple[Optional[SlotCell], ...], ...]

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ScheduleRow:
    kind: str  # class | lunch
    time: str
    class_index: Optional[int] = None


@dataclass(frozen=True)
class PreviewCell:
    subject: str
    color: str
    kind: str = "class"  # class | lunch
    teacher: Optional[str] = None
    course: Optional[str] = None


@dataclass(frozen=True)
class PreviewRow:
    time: str
    kind: str
    cells: Tuple[Optional[PreviewCell], ...]


@dataclass(frozen=True)
class PreviewTable:
    table_id: str
    name: str
    rows: Tuple[PreviewRow, ...]


@dataclass(frozen=True)
class PreviewSummary:
    total_courses: int
    total_teachers: int
    total_sessions: int


@dataclass(frozen=True)
class TeacherSummary:
    teacher_id: str
    teacher_name: str
    class_minutes: int
    subject_minutes: Tuple[Tuple[str, int], ...]


@dataclass(frozen=True)
class SubjectTotal:
    subject_name: str
    minutes: int


@dataclass(frozen=True)
class TeacherTag:
    teacher_id: str
    teacher_name: str
    color: str


@dataclass(frozen=True)
class SchedulePreview:
    days: Tuple[str, ...]
    courses: Tuple[PreviewTable, ...]
    teachers: Tuple[PreviewTable, ...]
    summary: PreviewSummary
    config: Dict[str, object]
    school_name: str = "School Scheduler"
    teacher_summaries: Tuple[TeacherSummary, ...] = ()
    subject_totals: Tuple[SubjectTotal, ...] = ()
    teacher_tags: Tuple[TeacherTag, ...] = ()


@dataclass(frozen=True)
class PreviewOutcome:
    preview: Optional[SchedulePreview] = None
    error: Optional[PreviewError] = None

    @property
    def ok(self) -> bool:
        return self.preview is not None and self.error is None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None


# ----------------------------
# Time arithmetic
# ----------------------------


def _to_int(part: str) -> int:
    try:
        return int(str(part).strip())
    except ValueError:
        return 0


def time_to_minutes(text: str) -> int:
    """Convert "HH:MM" to minutes after midnight.

    No range checks. Malformed parts count as 0 so a bad clock string yields a
    nonsensical but non-crashing schedule.
    """

    parts = str(text or "").split(":")
    hour = parts[0] if len(parts) > 0 else "0"
    minute = parts[1] if len(parts) > 1 else "0"
    if not (hour.strip().isdigit() and minute.strip().isdigit()):
        logger.warning("Malformed clock time %r; treating bad parts as 0", text)
    return _to_int(hour) * 60 + _to_int(minute)


def minutes_to_time(minutes: int) -> str:
    total = int(minutes) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"


def minutes_to_range(start: int, duration: int) -> str:
    return f"{minutes_to_time(start)} - {minutes_to_time(start + duration)}"


# ----------------------------
# Matching helpers
# ----------------------------


def _norm(text: str) -> str:
    return str(text or "").strip().lower()


def applicable_subjects(course: Course, subjects: Sequence[Subject]) -> List[Subject]:
    """Subjects taught to `course`: same level (exact) or level "general"."""

    return [s for s in subjects if s.level == course.level or str(s.level).lower() == GENERAL_LEVEL]


def required_weekly_blocks(course: Course, subjects: Sequence[Subject]) -> int:
    return sum(max(0, int(s.weekly_blocks)) for s in applicable_subjects(course, subjects))


def find_cycle(level: str, cycles: Sequence[Cycle]) -> Optional[Cycle]:
    key = _norm(level)
    for cycle in cycles:
        if key in {_norm(lv) for lv in cycle.levels}:
            return cycle
    return None


def resolve_teacher(subject_name: str, teachers: Sequence[Teacher]) -> str:
    """First teacher (input order) who teaches `subject_name`, else the sentinel."""

    key = _norm(subject_name)
    for t in teachers:
        if key in {_norm(n) for n in t.subject_names}:
            return t.name
    return NO_TEACHER


# ----------------------------
# Capacity
# ----------------------------


def block_minutes(config: PreviewConfig) -> int:
    block = int(config.block_duration_minutes)
    if block <= 0:
        raise PreviewError(ERROR_INVALID_CONFIG, f"Block duration must be positive, got {block} minutes.")
    return block


def compute_course_capacity(course: Course, config: PreviewConfig) -> CourseCapacity:
    block = block_minutes(config)
    day_start = time_to_minutes(config.day_start)
    lunch_duration = max(0, int(config.lunch_duration_minutes))

    cycle = find_cycle(course.level, config.cycles)
    if cycle is not None:
        cycle_end = time_to_minutes(cycle.end_time)
    else:
        cycle_end = day_start + block * FALLBACK_DAY_BLOCKS + lunch_duration

    # at least one block always fits
    day_end = max(day_start + block, cycle_end)

    lunch_deduction = 0
    if config.lunch_start:
        lunch_start = time_to_minutes(config.lunch_start)
        if day_start < lunch_start < day_end:
            lunch_deduction = lunch_duration

    available = day_end - day_start - lunch_deduction
    max_daily = max(1, available // block)
    return CourseCapacity(max_daily_blocks=int(max_daily), weekly_capacity=int(max_daily) * len(WORKING_DAYS))


# ----------------------------
# Session distribution
# ----------------------------


def _violates_adjacency(day: List[SlotCell], subject: Subject) -> bool:
    if subject.kind == SUBJECT_SPECIAL:
        return bool(day) and day[-1].subject_name == subject.name
    return len(day) >= 2 and day[-1].subject_name == subject.name and day[-2].subject_name == subject.name


def _place_subject(
    course: Course,
    subject: Subject,
    day_sessions: List[List[SlotCell]],
    cursor: int,
    *,
    max_daily_blocks: int,
    teacher_name: str,
) -> int:
    """Place all weekly sessions of `subject`; return the advanced day cursor.

    Phase 1 deals sessions round-robin from `cursor` under the adjacency rule,
    bounded by MAX_PLACEMENT_ATTEMPTS. Phase 2 sweeps days in order and fills
    spare capacity, ignoring adjacency.
    """

    n_days = len(day_sessions)
    wanted = max(0, int(subject.weekly_blocks))
    cell = SlotCell(subject_name=subject.name, teacher_name=teacher_name, color=subject.color)

    placed = 0
    attempts = 0
    while placed < wanted and attempts < MAX_PLACEMENT_ATTEMPTS:
        day = day_sessions[cursor % n_days]
        attempts += 1
        if len(day) >= max_daily_blocks or _violates_adjacency(day, subject):
            cursor += 1
            continue
        day.append(cell)
        placed += 1
        cursor += 1

    if placed < wanted:
        logger.warning(
            "Attempt budget exhausted for %s in %s (%d/%d placed); sweeping spare capacity",
            subject.name,
            course.name,
            placed,
            wanted,
        )
        for day in day_sessions:
            while placed < wanted and len(day) < max_daily_blocks:
                day.append(cell)
                placed += 1
            if placed >= wanted:
                break

    if placed < wanted:
        raise PreviewError(
            ERROR_PLACEMENT_IMPOSSIBLE,
            f"Not enough slots for {subject.name} in {course.name}.",
        )

    return cursor


def distribute_course_sessions(
    course: Course,
    subjects: Sequence[Subject],
    teachers: Sequence[Teacher],
    days: Sequence[str],
    max_daily_blocks: int,
) -> CourseGrid:
    """Fill a (row x day) grid for one course or raise PreviewError."""

    level_subjects = applicable_subjects(course, subjects)
    if not level_subjects:
        raise PreviewError(ERROR_NO_SUBJECTS, f"Course {course.name} has no subjects for level {course.level}.")

    if sum(max(0, int(s.weekly_blocks)) for s in level_subjects) == 0:
        raise PreviewError(ERROR_NO_WORKLOAD, f"Course {course.name} has no configured workload.")

    normal = [s for s in level_subjects if s.kind != SUBJECT_SPECIAL]
    special = [s for s in level_subjects if s.kind == SUBJECT_SPECIAL]

    day_sessions: List[List[SlotCell]] = [[] for _ in days]

    for group in (normal, special):
        cursor = 0
        for subject in group:
            cursor = _place_subject(
                course,
                subject,
                day_sessions,
                cursor,
                max_daily_blocks=int(max_daily_blocks),
                teacher_name=resolve_teacher(subject.name, teachers),
            )

    row_count = max((len(d) for d in day_sessions), default=0)
    if row_count == 0:
        raise PreviewError(ERROR_EMPTY_RESULT, f"Course {course.name} has no planned sessions.")

    rows = tuple(
        tuple(day[r] if r < len(day) else None for day in day_sessions)
        for r in range(row_count)
    )
    logger.debug("Course %s: %d rows, per-day load %s", course.name, row_count, [len(d) for d in day_sessions])
    return CourseGrid(course=course, rows=rows)


# ----------------------------
# Schedule structure
# ----------------------------


def lunch_row_label(config: PreviewConfig, start: Optional[int] = None) -> str:
    lunch_start = time_to_minutes(config.lunch_start or "") if start is None else start
    return minutes_to_range(lunch_start, int(config.lunch_duration_minutes))


def build_schedule_structure(row_count: int, config: PreviewConfig) -> List[ScheduleRow]:
    """Ordered time rows for `row_count` class rows with the lunch row interleaved."""

    if row_count <= 0:
        if config.has_lunch:
            return [ScheduleRow(kind="lunch", time=lunch_row_label(config))]
        return []

    block = block_minutes(config)
    day_start = time_to_minutes(config.day_start)
    lunch_duration = int(config.lunch_duration_minutes)

    lunch_start: Optional[int] = None
    lunch_index: Optional[int] = None
    if config.has_lunch:
        lunch_start = time_to_minutes(config.lunch_start or "")
        lunch_index = (lunch_start - day_start) // block

    rows: List[ScheduleRow] = []
    clock = day_start
    lunch_placed = False
    for i in range(int(row_count)):
        if lunch_index is not None and i == lunch_index:
            shown = max(clock, lunch_start)
            rows.append(ScheduleRow(kind="lunch", time=minutes_to_range(shown, lunch_duration)))
            clock += lunch_duration
            lunch_placed = True
        rows.append(ScheduleRow(kind="class", time=minutes_to_range(clock, block), class_index=i))
        clock += block

    if lunch_index is not None and not lunch_placed:
        shown = max(clock, lunch_start)
        rows.append(ScheduleRow(kind="lunch", time=minutes_to_range(shown, lunch_duration)))

    return rows


# ----------------------------
# Rendering / teacher aggregation
# ----------------------------


LUNCH_CELL = PreviewCell(subject=LUNCH_LABEL, color=LUNCH_COLOR, kind="lunch")


def render_course_table(grid: CourseGrid, structure: Sequence[ScheduleRow], days: Sequence[str]) -> PreviewTable:
    rows: List[PreviewRow] = []
    for srow in structure:
        if srow.kind == "lunch":
            rows.append(PreviewRow(time=srow.time, kind="lunch", cells=tuple(LUNCH_CELL for _ in days)))
            continue
        r = int(srow.class_index or 0)
        source = grid.rows[r] if r < grid.row_count else tuple(None for _ in days)
        cells = tuple(
            PreviewCell(subject=c.subject_name, color=c.color, teacher=c.teacher_name) if c is not None else None
            for c in source
        )
        rows.append(PreviewRow(time=srow.time, kind="class", cells=cells))
    return PreviewTable(table_id=grid.course.course_id, name=grid.course.name, rows=tuple(rows))


def aggregate_teacher_tables(
    course_tables: Sequence[PreviewTable],
    days: Sequence[str] = WORKING_DAYS,
    teachers: Sequence[Teacher] = (),
) -> List[PreviewTable]:
    """Re-index course tables by teacher name.

    The first course table is the row template for every teacher table.
    """

    if not course_tables:
        return []

    template = course_tables[0].rows
    n_days = len(days)
    grids: Dict[str, List[List[Optional[PreviewCell]]]] = {}

    def blank() -> List[List[Optional[PreviewCell]]]:
        return [
            [LUNCH_CELL] * n_days if row.kind == "lunch" else [None] * n_days
            for row in template
        ]

    for table in course_tables:
        for r, row in enumerate(table.rows):
            if row.kind != "class" or r >= len(template):
                continue
            for d, cell in enumerate(row.cells):
                if cell is None or not cell.teacher or cell.teacher == NO_TEACHER:
                    continue
                grid = grids.setdefault(cell.teacher, blank())
                grid[r][d] = PreviewCell(subject=cell.subject, color=cell.color, course=table.name)

    ids_by_name = {}
    for t in teachers:
        ids_by_name.setdefault(t.name, t.teacher_id)

    out: List[PreviewTable] = []
    for name, grid in grids.items():
        rows = tuple(
            PreviewRow(time=template[r].time, kind=template[r].kind, cells=tuple(grid[r]))
            for r in range(len(template))
        )
        out.append(PreviewTable(table_id=str(ids_by_name.get(name, name)), name=name, rows=rows))
    return out


# ----------------------------
# Summaries
# ----------------------------


def count_sessions(tables: Sequence[PreviewTable]) -> int:
    return sum(
        1
        for table in tables
        for row in table.rows
        if row.kind == "class"
        for cell in row.cells
        if cell is not None
    )


def tag_color(index: int) -> str:
    return f"hsl({(index * 67) % 360} 70% 45%)"


def _teacher_summaries(teacher_tables: Sequence[PreviewTable], block: int) -> List[TeacherSummary]:
    out: List[TeacherSummary] = []
    for table in teacher_tables:
        per_subject: Dict[str, int] = {}
        for row in table.rows:
            if row.kind != "class":
                continue
            for cell in row.cells:
                if cell is not None:
                    per_subject[cell.subject] = per_subject.get(cell.subject, 0) + block
        out.append(
            TeacherSummary(
                teacher_id=table.table_id,
                teacher_name=table.name,
                class_minutes=sum(per_subject.values()),
                subject_minutes=tuple(per_subject.items()),
            )
        )
    return out


def _subject_totals(course_tables: Sequence[PreviewTable], block: int) -> List[SubjectTotal]:
    totals: Dict[str, int] = {}
    for table in course_tables:
        for row in table.rows:
            if row.kind != "class":
                continue
            for cell in row.cells:
                if cell is not None:
                    totals[cell.subject] = totals.get(cell.subject, 0) + block
    return [SubjectTotal(subject_name=k, minutes=v) for k, v in totals.items()]


# ----------------------------
# Assembly
# ----------------------------


def _working_courses(courses: Sequence[Course], mode: str, course_id: Optional[str]) -> List[Course]:
    if mode != MODE_COURSE:
        return list(courses)
    match = next((c for c in courses if str(c.course_id) == str(course_id)), None)
    if match is None:
        raise PreviewError(ERROR_COURSE_NOT_FOUND, f"Course {course_id} was not found.")
    return [match]


def _assemble(
    courses: Sequence[Course],
    subjects: Sequence[Subject],
    teachers: Sequence[Teacher],
    mode: str,
    course_id: Optional[str],
    config: PreviewConfig,
) -> SchedulePreview:
    if not courses:
        raise PreviewError(ERROR_EMPTY_INPUT, "There are no courses registered. Add courses before generating.")
    if not subjects:
        raise PreviewError(ERROR_EMPTY_INPUT, "There are no subjects registered. Add subjects before generating.")
    if not teachers:
        raise PreviewError(ERROR_EMPTY_INPUT, "There are no teachers registered. Add teachers before generating.")

    working = _working_courses(courses, mode, course_id)
    days = WORKING_DAYS

    capacities: Dict[str, CourseCapacity] = {}
    for course in working:
        cap = compute_course_capacity(course, config)
        required = required_weekly_blocks(course, subjects)
        logger.debug(
            "Course %s: %d blocks/day, capacity %d, required %d",
            course.name,
            cap.max_daily_blocks,
            cap.weekly_capacity,
            required,
        )
        if required > cap.weekly_capacity:
            raise PreviewError(
                ERROR_CAPACITY_EXCEEDED,
                f"The weekly workload of {course.name} exceeds its capacity: "
                f"{cap.weekly_capacity} blocks available, {required} blocks required.",
            )
        capacities[course.course_id] = cap

    grids = [
        distribute_course_sessions(course, subjects, teachers, days, capacities[course.course_id].max_daily_blocks)
        for course in working
    ]

    row_count = max(g.row_count for g in grids)
    structure = build_schedule_structure(row_count, config)

    course_tables = [render_course_table(g, structure, days) for g in grids]
    teacher_tables = aggregate_teacher_tables(course_tables, days, teachers)

    block = block_minutes(config)
    summaries = _teacher_summaries(teacher_tables, block)
    summary = PreviewSummary(
        total_courses=len(course_tables),
        total_teachers=len(teacher_tables),
        total_sessions=count_sessions(course_tables),
    )
    logger.info(
        "Preview ready: %d courses, %d teachers, %d sessions",
        summary.total_courses,
        summary.total_teachers,
        summary.total_sessions,
    )

    return SchedulePreview(
        days=days,
        courses=tuple(course_tables),
        teachers=tuple(teacher_tables),
        summary=summary,
        config={
            "block_duration_minutes": block,
            "day_start": config.day_start,
            "lunch_start": config.lunch_start,
            "lunch_duration_minutes": int(config.lunch_duration_minutes),
        },
        school_name=config.school_name,
        teacher_summaries=tuple(summaries),
        subject_totals=tuple(_subject_totals(course_tables, block)),
        teacher_tags=tuple(
            TeacherTag(teacher_id=s.teacher_id, teacher_name=s.teacher_name, color=tag_color(i))
            for i, s in enumerate(summaries)
        ),
    )


def build_schedule_preview(
    courses: Sequence[Course],
    subjects: Sequence[Subject],
    teachers: Sequence[Teacher],
    mode: str = MODE_FULL,
    course_id: Optional[str] = None,
    config: PreviewConfig = PreviewConfig(),
) -> PreviewOutcome:
    """Generate the weekly preview for all courses or a single course.

    Never raises for business-rule failures: the first failure is returned as
    `outcome.error` and no partial preview is produced.
    """

    try:
        preview = _assemble(courses, subjects, teachers, mode, course_id, config)
    except PreviewError as e:
        logger.info("Preview generation failed (%s): %s", e.kind, e.message)
        return PreviewOutcome(error=e)
    return PreviewOutcome(preview=preview)
