"""Weekly Schedule Preview page.

Loads courses, subjects, teachers and the scheduling configuration from the
SQLite DB and builds a weekly preview with the greedy allocation engine.

Outputs:
- Summary metrics
- Course timetable view
- Teacher timetable view
- Workbook / ZIP / Markdown / PNG export

"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import streamlit as st

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.weekly_preview import (
    MODE_COURSE,
    MODE_FULL,
    Course,
    Cycle,
    PreviewConfig,
    Subject,
    Teacher,
)
from ui.database import crud
from ui.database.db import db_session
from ui.utils.schedule_cache import get_or_build_preview
from utils.timetable_export import (
    ImageExportOptions,
    df_to_markdown,
    df_to_png_bytes,
    preview_table_colors,
    preview_table_df,
    preview_workbook_bytes,
    preview_zip_bytes,
    subject_totals_df,
    teacher_workload_df,
)


@dataclass(frozen=True)
class PreviewInputs:
    courses: tuple[Course, ...]
    subjects: tuple[Subject, ...]
    teachers: tuple[Teacher, ...]
    config: PreviewConfig


def preview_config_from_record(record: Dict[str, Any]) -> PreviewConfig:
    """Convert the `scheduling_config` row (+ cycles) into a PreviewConfig.

    Missing fields fall back to the PreviewConfig defaults.
    """

    defaults = PreviewConfig()
    cycles = tuple(
        Cycle(
            cycle_id=str(c["cycle_id"]),
            name=str(c.get("name") or ""),
            levels=tuple(str(x) for x in (c.get("levels") or [])),
            end_time=str(c.get("end_time") or ""),
        )
        for c in (record.get("cycles") or [])
    )
    block = record.get("block_duration_minutes")
    lunch_duration = record.get("lunch_duration_minutes")
    # A stored NULL lunch start disables the lunch window.
    lunch_start = (record.get("lunch_start") or None) if "lunch_start" in record else defaults.lunch_start
    return PreviewConfig(
        block_duration_minutes=int(block) if block else defaults.block_duration_minutes,
        day_start=str(record.get("day_start") or defaults.day_start),
        lunch_start=lunch_start,
        lunch_duration_minutes=int(lunch_duration) if lunch_duration is not None else defaults.lunch_duration_minutes,
        cycles=cycles,
        school_name=str(record.get("school_name") or defaults.school_name),
    )


def _build_inputs_from_db() -> PreviewInputs:
    with db_session() as conn:
        config_raw = crud.get_scheduling_config(conn)
        courses_raw = crud.list_courses(conn)
        subjects_raw = crud.list_subjects(conn)
        teachers_raw = crud.list_teachers(conn)

    courses = tuple(
        Course(course_id=str(c["course_id"]), name=str(c["name"]), level=str(c["level"]))
        for c in courses_raw
    )
    subjects = tuple(
        Subject(
            subject_id=str(s["subject_id"]),
            name=str(s["name"]),
            level=str(s["level"]),
            weekly_blocks=int(s["weekly_blocks"]),
            kind=str(s.get("kind") or "Normal"),
            color=str(s.get("color") or "#3b82f6"),
        )
        for s in subjects_raw
    )
    teachers = tuple(
        Teacher(
            teacher_id=str(t["teacher_id"]),
            name=str(t["name"]),
            subject_names=tuple(t.get("subject_names") or ()),
            contract_type=str(t.get("contract_type") or "Full-time"),
            weekly_hours=int(t.get("weekly_hours") or 0),
        )
        for t in teachers_raw
    )
    return PreviewInputs(
        courses=courses,
        subjects=subjects,
        teachers=teachers,
        config=preview_config_from_record(config_raw),
    )


def _render_table(table, days: list[str], *, kind: str) -> None:
    df = preview_table_df(table, days)
    st.dataframe(df, use_container_width=True, hide_index=True)

    st.subheader("Download timetable (Markdown / Image)")
    md = df_to_markdown(df)
    st.download_button(
        "Download Markdown table",
        data=md.encode("utf-8"),
        file_name=f"timetable_{kind}_{table.table_id}.md",
        mime="text/markdown",
    )
    png = df_to_png_bytes(
        df,
        options=ImageExportOptions(title=f"{table.name} Timetable"),
        cell_colors=preview_table_colors(table, days),
    )
    st.download_button(
        "Download timetable image (PNG)",
        data=png,
        file_name=f"timetable_{kind}_{table.table_id}.png",
        mime="image/png",
    )


def main() -> None:
    st.title("Weekly Schedule Preview")
    st.caption("Generate a weekly timetable per course and per teacher.")

    st.session_state.setdefault("preview_cache", {})
    st.session_state.setdefault("preview_last_outcome", None)

    inputs = _build_inputs_from_db()

    if not inputs.courses:
        st.warning("Add at least one Course first (Courses page).")
        return
    if not inputs.subjects:
        st.warning("Add at least one Subject first (Subjects page).")
        return
    if not inputs.teachers:
        st.warning("Add at least one Teacher first (Teachers page).")
        return

    st.subheader("Scope")
    c1, c2 = st.columns([1, 2])
    scope = c1.radio("Generate for", options=["All courses", "One course"], horizontal=True)
    course_id: Optional[str] = None
    if scope == "One course":
        labels = {f"{c.name} ({c.level})": c.course_id for c in inputs.courses}
        course_id = labels[c2.selectbox("Course", options=list(labels.keys()))]

    use_cache = st.checkbox("Reuse cached preview when inputs are unchanged", value=True)

    if st.button("Generate preview", type="primary"):
        cache = st.session_state["preview_cache"] if use_cache else {}
        with st.spinner("Allocating sessions..."):
            outcome, used_cache = get_or_build_preview(
                cache,
                courses=inputs.courses,
                subjects=inputs.subjects,
                teachers=inputs.teachers,
                config=inputs.config,
                mode=MODE_COURSE if course_id else MODE_FULL,
                course_id=course_id,
            )
        if used_cache:
            st.info("Reused cached preview (inputs unchanged).")
        st.session_state["preview_last_outcome"] = outcome

    outcome = st.session_state.get("preview_last_outcome")
    if outcome is None:
        return
    if not outcome.ok:
        st.error(outcome.error_message)
        return

    preview = outcome.preview
    days = list(preview.days)

    st.subheader("Summary")
    m1, m2, m3 = st.columns(3)
    m1.metric("Courses", preview.summary.total_courses)
    m2.metric("Teachers", preview.summary.total_teachers)
    m3.metric("Sessions", preview.summary.total_sessions)
    st.caption(
        f"Blocks of {preview.config['block_duration_minutes']} min from {preview.config['day_start']}"
        + (
            f" | lunch {preview.config['lunch_start']} ({preview.config['lunch_duration_minutes']} min)"
            if preview.config.get("lunch_start")
            else ""
        )
    )

    cw1, cw2 = st.columns(2)
    with cw1:
        st.write("Teacher workload")
        wl = teacher_workload_df(preview)
        if wl.empty:
            st.caption("No teacher has assigned sessions.")
        else:
            st.dataframe(wl, use_container_width=True, hide_index=True)
    with cw2:
        st.write("Subject totals")
        st.dataframe(subject_totals_df(preview), use_container_width=True, hide_index=True)

    if preview.teacher_tags:
        tags = " ".join(
            f"<span style='background:{t.color};color:white;padding:2px 8px;border-radius:8px'>{t.teacher_name}</span>"
            for t in preview.teacher_tags
        )
        st.markdown(tags, unsafe_allow_html=True)

    st.subheader("Spreadsheet export")
    st.download_button(
        "Download preview workbook (.xlsx)",
        data=preview_workbook_bytes(preview),
        file_name="schedule_preview.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    st.download_button(
        "Download ALL outputs (.zip)",
        data=preview_zip_bytes(preview),
        file_name="schedule_preview_bundle.zip",
        mime="application/zip",
    )

    st.subheader("View timetable")
    view = st.radio("View", options=["By Course", "By Teacher"], horizontal=True)

    if view == "By Course":
        names = [t.name for t in preview.courses]
        table = preview.courses[names.index(st.selectbox("Course", options=names, key="view_course"))]
        _render_table(table, days, kind="course")
    else:
        if not preview.teachers:
            st.info("No session could be matched to a teacher. Check the teachers' subject names.")
            return
        names = [t.name for t in preview.teachers]
        table = preview.teachers[names.index(st.selectbox("Teacher", options=names, key="view_teacher"))]
        _render_table(table, days, kind="teacher")


if __name__ == "__main__":
    main()
