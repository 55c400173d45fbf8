"""Course Management page (CRUD).

A course is one class group (e.g. "1st A"); its level selects the subjects it takes.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import streamlit as st

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ui.database.db import db_session
from ui.database import crud
from ui.utils.id_generator import generate_course_id
from ui.utils.validators import require_non_empty


def main() -> None:
    st.title("Course Management")

    with db_session() as conn:
        courses = crud.list_courses(conn)
        cycles = crud.list_cycles(conn)

    known_levels = sorted({lvl for c in cycles for lvl in c["levels"]})

    tab_add, tab_view = st.tabs(["Add / Update", "View / Delete"])

    with tab_add:
        options = ["(New course)"] + [c["course_id"] for c in courses]
        edit_id = st.selectbox("Select Course", options=options)
        initial = next((c for c in courses if c["course_id"] == edit_id), None)

        with st.form("course_form"):
            c1, c2 = st.columns([2, 1])
            name = c1.text_input("Course name", value=(initial["name"] if initial else ""), placeholder="e.g., 1st A")
            level = c2.text_input(
                "Level",
                value=(initial["level"] if initial else ""),
                placeholder="e.g., 1st",
                help=("Levels used by cycles: " + ", ".join(known_levels)) if known_levels else None,
            )
            submitted = st.form_submit_button("Save Course")

        if submitted:
            ok, msg = require_non_empty(name, "Course name")
            if not ok:
                st.error(msg)
                st.stop()
            ok, msg = require_non_empty(level, "Level")
            if not ok:
                st.error(msg)
                st.stop()

            with db_session() as conn:
                course_id = initial["course_id"] if initial else generate_course_id(conn)
                crud.upsert_course(conn, course_id=course_id, name=name.strip(), level=level.strip())
            st.success(f"Course {course_id} saved.")

    with tab_view:
        if not courses:
            st.info("No courses yet.")
            return

        st.dataframe(pd.DataFrame(courses), use_container_width=True, hide_index=True)

        st.divider()
        st.subheader("Delete course")
        cid = st.selectbox("Select Course ID", options=[c["course_id"] for c in courses])
        if st.button("Delete", type="primary"):
            with db_session() as conn:
                crud.delete_course(conn, cid)
            st.success(f"Deleted {cid}")
            st.rerun()


if __name__ == "__main__":
    main()
