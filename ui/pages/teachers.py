"""Teacher Management page (CRUD).

Each teacher lists the subject names they can teach. The preview assigns a
session to the first teacher (in list order) whose subjects include it.
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
from ui.utils.id_generator import generate_teacher_id
from ui.utils.validators import require_non_empty, validate_choice, validate_positive_int


CONTRACT_TYPES = ["Full-time", "Part-time", "Hourly"]


def main() -> None:
    st.title("Teacher Management")

    with db_session() as conn:
        teachers = crud.list_teachers(conn)
        subjects = crud.list_subjects(conn)

    subject_names = sorted({s["name"] for s in subjects})

    tab_add, tab_view = st.tabs(["Add / Update", "View / Delete"])

    with tab_add:
        options = ["(New teacher)"] + [t["teacher_id"] for t in teachers]
        edit_id = st.selectbox("Select Teacher ID", options=options)
        initial = next((t for t in teachers if t["teacher_id"] == edit_id), None)

        if not subject_names:
            st.warning("Add subjects first; teachers are linked to subject names.")

        with st.form("teacher_form"):
            name = st.text_input("Name", value=(initial["name"] if initial else ""), placeholder="e.g., Ana Lopez")

            c1, c2 = st.columns(2)
            contract_type = c1.selectbox(
                "Contract",
                options=CONTRACT_TYPES,
                index=CONTRACT_TYPES.index(initial["contract_type"])
                if initial and initial.get("contract_type") in CONTRACT_TYPES
                else 0,
            )
            weekly_hours = c2.number_input(
                "Weekly hours",
                min_value=0,
                max_value=60,
                value=int((initial.get("weekly_hours", 0) if initial else 0)),
            )

            # Keep names that no longer exist as subjects so an edit does not drop them silently.
            current = list(initial["subject_names"]) if initial else []
            taught = st.multiselect(
                "Subjects taught",
                options=sorted(set(subject_names) | set(current)),
                default=current,
            )
            submitted = st.form_submit_button("Save Teacher")

        if submitted:
            ok, msg = require_non_empty(name, "Name")
            if not ok:
                st.error(msg)
                st.stop()
            ok, msg = validate_choice(str(contract_type), "Contract", CONTRACT_TYPES)
            if not ok:
                st.error(msg)
                st.stop()
            ok, msg = validate_positive_int(int(weekly_hours), "Weekly hours", 0, 60)
            if not ok:
                st.error(msg)
                st.stop()

            with db_session() as conn:
                teacher_id = initial["teacher_id"] if initial else generate_teacher_id(conn)
                crud.upsert_teacher(
                    conn,
                    teacher_id=teacher_id,
                    name=name.strip(),
                    contract_type=str(contract_type),
                    weekly_hours=int(weekly_hours),
                    subject_names=list(taught),
                )
            st.success(f"Teacher {teacher_id} saved.")

    with tab_view:
        if not teachers:
            st.info("No teachers yet.")
            return

        df = pd.DataFrame(
            [{**t, "subject_names": ", ".join(t["subject_names"])} for t in teachers]
        )
        st.dataframe(df, use_container_width=True, hide_index=True)

        st.divider()
        st.subheader("Delete teacher")
        tid = st.selectbox("Select Teacher ID", options=[t["teacher_id"] for t in teachers])
        if st.button("Delete", type="primary"):
            with db_session() as conn:
                crud.delete_teacher(conn, tid)
            st.success(f"Deleted {tid}")
            st.rerun()


if __name__ == "__main__":
    main()
