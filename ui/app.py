"""Main Streamlit app entrypoint.

Run:
    streamlit run ui/app.py

"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import streamlit as st

# Ensure project root is on PYTHONPATH when Streamlit runs this file
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ui.database.db import db_session
from ui.database import crud


logging.basicConfig(
    level=os.getenv("SCHOOL_SCHEDULER_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(
    page_title="School Scheduler",
    page_icon="🗓️",
    layout="wide",
)


def _inject_css() -> None:
    st.markdown(
        """
        <style>
        .block-container { padding-top: 1.2rem; }
        div[data-testid="stMetric"] { background: #0b1220; border: 1px solid rgba(255,255,255,0.08); padding: 12px; border-radius: 12px; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def main() -> None:
    _inject_css()

    with db_session() as conn:
        config = crud.get_scheduling_config(conn)
        courses = crud.list_courses(conn)
        subjects = crud.list_subjects(conn)
        teachers = crud.list_teachers(conn)

    st.sidebar.title(str(config.get("school_name") or "Scheduler"))
    st.sidebar.caption("Weekly timetable preview")

    st.title("Dashboard")
    st.write(
        "Use the sidebar pages to manage courses, subjects, teachers and academic settings. "
        "The Schedule Preview page turns this data into weekly timetables per course and per teacher."
    )

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Courses", len(courses))
    c2.metric("Subjects", len(subjects))
    c3.metric("Teachers", len(teachers))
    c4.metric("Cycles", len(config.get("cycles") or []))

    st.divider()
    st.subheader("What’s next")
    st.info(
        "Fill in Academic Settings first (block length, day start, lunch, cycles), "
        "then add Courses, Subjects and Teachers, then open Schedule Preview."
    )


if __name__ == "__main__":
    main()
