"""Subject Management page (CRUD).

Subjects are defined per level; "General" subjects apply to every level.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import streamlit as st

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.weekly_preview import GENERAL_LEVEL, SUBJECT_NORMAL, SUBJECT_SPECIAL
from ui.database.db import db_session
from ui.database import crud
from ui.utils.id_generator import generate_subject_id
from ui.utils.validators import require_non_empty, validate_choice, validate_color, validate_positive_int


SUBJECT_KINDS = [SUBJECT_NORMAL, SUBJECT_SPECIAL]


def main() -> None:
    st.title("Subject Management")

    with db_session() as conn:
        subjects = crud.list_subjects(conn)

    tab_add, tab_view = st.tabs(["Add / Update", "View / Delete"])

    with tab_add:
        st.subheader("Edit existing")
        options = ["(New subject)"] + [s["subject_id"] for s in subjects]
        edit_id = st.selectbox("Select Subject ID", options=options)

        initial = None
        if edit_id != "(New subject)":
            initial = next((s for s in subjects if s.get("subject_id") == edit_id), None)

        st.divider()
        st.subheader("Details")
        with st.form("subject_form"):
            c1, c2 = st.columns([2, 1])
            name = c1.text_input(
                "Subject name",
                value=(initial.get("name", "") if initial else ""),
                placeholder="e.g., Mathematics",
                help="Teachers are matched to subjects by this name.",
            )
            level = c2.text_input(
                "Level",
                value=(initial.get("level", "") if initial else ""),
                placeholder=f"e.g., 1st or {GENERAL_LEVEL}",
                help=f"Use '{GENERAL_LEVEL}' for subjects taught at every level.",
            )

            c3, c4, c5 = st.columns(3)
            weekly_blocks = c3.number_input(
                "Weekly blocks",
                min_value=1,
                max_value=40,
                value=int((initial.get("weekly_blocks", 2) if initial else 2)),
            )
            kind = c4.selectbox(
                "Kind",
                options=SUBJECT_KINDS,
                index=SUBJECT_KINDS.index(initial["kind"]) if initial and initial.get("kind") in SUBJECT_KINDS else 0,
                help="Special subjects get at most one block per day.",
            )
            color = c5.color_picker("Color", value=str((initial.get("color") if initial else "#3b82f6")))

            submitted = st.form_submit_button("Save Subject")

        if submitted:
            ok, msg = require_non_empty(name, "Subject name")
            if not ok:
                st.error(msg)
                st.stop()
            ok, msg = require_non_empty(level, "Level")
            if not ok:
                st.error(msg)
                st.stop()
            ok, msg = validate_positive_int(int(weekly_blocks), "Weekly blocks", 1, 40)
            if not ok:
                st.error(msg)
                st.stop()
            ok, msg = validate_choice(str(kind), "Kind", SUBJECT_KINDS)
            if not ok:
                st.error(msg)
                st.stop()
            ok, msg = validate_color(str(color), "Color")
            if not ok:
                st.error(msg)
                st.stop()

            with db_session() as conn:
                subject_id = initial["subject_id"] if initial else generate_subject_id(conn)
                crud.upsert_subject(
                    conn,
                    subject_id=subject_id,
                    name=name.strip(),
                    level=level.strip(),
                    weekly_blocks=int(weekly_blocks),
                    kind=str(kind),
                    color=str(color),
                )
            st.success(f"Subject {subject_id} saved.")

    with tab_view:
        if not subjects:
            st.info("No subjects yet.")
            return

        df = pd.DataFrame(subjects)
        st.dataframe(df, use_container_width=True, hide_index=True)

        st.divider()
        st.subheader("Delete subject")
        sid = st.selectbox("Select Subject ID", options=[s["subject_id"] for s in subjects])
        if st.button("Delete", type="primary"):
            with db_session() as conn:
                crud.delete_subject(conn, sid)
            st.success(f"Deleted {sid}")
            st.rerun()


if __name__ == "__main__":
    main()
