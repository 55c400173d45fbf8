"""Academic Settings page (block length, day start, lunch, cycles)."""

from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import streamlit as st

# Ensure project root is on PYTHONPATH when Streamlit runs pages
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ui.database.db import db_session
from ui.database import crud
from ui.utils.id_generator import generate_cycle_id
from ui.utils.validators import (
    require_non_empty,
    validate_clock_time,
    validate_cycle_window,
    validate_positive_int,
    validate_unique,
)


def _settings_form(s: dict) -> None:
    with st.form("academic_settings_form"):
        school_name = st.text_input("School name", value=str(s.get("school_name") or "School Scheduler"))

        c1, c2 = st.columns(2)
        block_minutes = c1.number_input(
            "Block duration (minutes)",
            min_value=5,
            max_value=240,
            value=int(s.get("block_duration_minutes") or 45),
        )
        day_start = c2.text_input("Day start (HH:MM)", value=str(s.get("day_start") or "08:00"))

        st.caption("Lunch (optional)")
        c3, c4, c5 = st.columns(3)
        has_lunch = c3.checkbox("Lunch break", value=bool(s.get("lunch_start")))
        lunch_start = c4.text_input("Lunch start (HH:MM)", value=str(s.get("lunch_start") or "13:00"), disabled=not has_lunch)
        lunch_minutes = c5.number_input(
            "Lunch duration (minutes)",
            min_value=0,
            max_value=240,
            value=int(s.get("lunch_duration_minutes") or 0),
            disabled=not has_lunch,
        )

        submitted = st.form_submit_button("Save Settings")

    if not submitted:
        return

    ok, msg = require_non_empty(school_name, "School name")
    if not ok:
        st.error(msg)
        return
    ok, msg = validate_positive_int(int(block_minutes), "Block duration", 5, 240)
    if not ok:
        st.error(msg)
        return
    ok, msg = validate_clock_time(day_start, "Day start")
    if not ok:
        st.error(msg)
        return
    if has_lunch:
        ok, msg = validate_clock_time(lunch_start, "Lunch start")
        if not ok:
            st.error(msg)
            return

    with db_session() as conn:
        crud.update_scheduling_config(
            conn,
            school_name=school_name.strip(),
            block_duration_minutes=int(block_minutes),
            day_start=day_start.strip(),
            lunch_start=lunch_start.strip() if has_lunch else None,
            lunch_duration_minutes=int(lunch_minutes) if has_lunch else 0,
        )

    st.success("Academic settings saved.")


def _cycles_section(s: dict) -> None:
    cycles = s.get("cycles") or []

    st.caption(
        "A cycle groups course levels that share a day end time. "
        "Courses outside every cycle use the default day capacity."
    )
    if cycles:
        st.dataframe(
            pd.DataFrame(
                [
                    {"cycle_id": c["cycle_id"], "name": c["name"], "end_time": c["end_time"], "levels": ", ".join(c["levels"])}
                    for c in cycles
                ]
            ),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("No cycles yet.")

    options = ["(New cycle)"] + [c["cycle_id"] for c in cycles]
    edit_id = st.selectbox("Select Cycle", options=options)
    initial = next((c for c in cycles if c["cycle_id"] == edit_id), None)

    with st.form("cycle_form"):
        c1, c2 = st.columns([2, 1])
        name = c1.text_input("Cycle name", value=(initial["name"] if initial else ""), placeholder="e.g., Primary")
        end_time = c2.text_input("Day end (HH:MM)", value=(initial["end_time"] if initial else "15:00"))
        levels_text = st.text_input(
            "Levels (comma-separated)",
            value=", ".join(initial["levels"]) if initial else "",
            placeholder="e.g., 1st, 2nd, 3rd",
        )
        submitted = st.form_submit_button("Save Cycle")

    if submitted:
        levels = [x.strip() for x in levels_text.split(",") if x.strip()]
        ok, msg = require_non_empty(name, "Cycle name")
        if not ok:
            st.error(msg)
            st.stop()
        if not levels:
            st.error("Add at least one level to the cycle")
            st.stop()
        ok, msg = validate_unique(levels, "Levels")
        if not ok:
            st.error(msg)
            st.stop()
        ok, msg = validate_cycle_window(day_start=str(s.get("day_start") or "08:00"), end_time=end_time)
        if not ok:
            st.error(msg)
            st.stop()

        with db_session() as conn:
            cycle_id = initial["cycle_id"] if initial else generate_cycle_id(conn)
            crud.upsert_cycle(conn, cycle_id=cycle_id, name=name.strip(), end_time=end_time.strip(), levels=levels)
        st.success(f"Cycle {cycle_id} saved.")
        st.rerun()

    if initial and st.button("Delete cycle", type="primary"):
        with db_session() as conn:
            crud.delete_cycle(conn, initial["cycle_id"])
        st.success(f"Deleted {initial['cycle_id']}")
        st.rerun()


def main() -> None:
    st.title("Academic Settings")

    with db_session() as conn:
        s = crud.get_scheduling_config(conn)

    tab_settings, tab_cycles = st.tabs(["Day structure", "Cycles"])
    with tab_settings:
        _settings_form(s)
    with tab_cycles:
        _cycles_section(s)


if __name__ == "__main__":
    main()
