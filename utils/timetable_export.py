from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from typing import Optional, Sequence

import pandas as pd


logger = logging.getLogger(__name__)

TIME_COLUMN = "TIME"


def cell_label(cell) -> str:
    """Human-readable text for one preview cell.

    Course tables show 'SUBJECT (TEACHER)', teacher tables 'SUBJECT (COURSE)'.
    """

    if cell is None:
        return ""
    if getattr(cell, "kind", "class") == "lunch":
        return str(cell.subject)
    extra = getattr(cell, "course", None) or getattr(cell, "teacher", None)
    return f"{cell.subject} ({extra})" if extra else str(cell.subject)


def preview_table_df(table, days: Sequence[str]) -> pd.DataFrame:
    """Convert one preview table (course or teacher) into a spreadsheet-style DataFrame."""

    rows = []
    for row in table.rows:
        out = {TIME_COLUMN: row.time}
        for day, cell in zip(days, row.cells):
            out[str(day)] = cell_label(cell)
        rows.append(out)
    return pd.DataFrame(rows, columns=[TIME_COLUMN] + [str(d) for d in days])


def preview_summary_df(preview) -> pd.DataFrame:
    cfg = preview.config or {}
    rows = [
        ["SCHOOL", preview.school_name],
        ["COURSES", preview.summary.total_courses],
        ["TEACHERS", preview.summary.total_teachers],
        ["SESSIONS", preview.summary.total_sessions],
        ["BLOCK (MIN)", cfg.get("block_duration_minutes")],
        ["DAY START", cfg.get("day_start")],
        ["LUNCH START", cfg.get("lunch_start")],
        ["LUNCH (MIN)", cfg.get("lunch_duration_minutes")],
    ]
    return pd.DataFrame(rows, columns=["Field", "Value"])


def teacher_workload_df(preview) -> pd.DataFrame:
    """One row per teacher: class minutes/hours plus minutes per subject."""

    rows = []
    for s in preview.teacher_summaries:
        r = {
            "teacher_id": s.teacher_id,
            "name": s.teacher_name,
            "class_minutes": int(s.class_minutes),
            "class_hours": round(int(s.class_minutes) / 60.0, 2),
        }
        for subject, minutes in s.subject_minutes:
            r[subject] = int(minutes)
        rows.append(r)

    out = pd.DataFrame(rows)
    if out.empty:
        return out
    subject_cols = [c for c in out.columns if c not in {"teacher_id", "name", "class_minutes", "class_hours"}]
    if subject_cols:
        out[subject_cols] = out[subject_cols].fillna(0).astype(int)
    return out.sort_values(["class_minutes", "name"], ascending=[False, True]).reset_index(drop=True)


def subject_totals_df(preview) -> pd.DataFrame:
    out = pd.DataFrame(
        [{"subject": t.subject_name, "minutes": int(t.minutes)} for t in preview.subject_totals],
        columns=["subject", "minutes"],
    )
    if out.empty:
        return out
    out["hours"] = (out["minutes"] / 60.0).round(2)
    return out


def _safe_sheet_name(name: str) -> str:
    """Excel sheet names: max 31 chars, cannot contain: `: \\ / ? * [ ]`."""

    bad = [":", "\\", "/", "?", "*", "[", "]"]
    out = str(name or "Sheet")
    for b in bad:
        out = out.replace(b, "-")
    out = out.strip() or "Sheet"
    return out[:31]


def _unique_sheet_name(name: str, used: set[str]) -> str:
    base = _safe_sheet_name(name)
    candidate = base
    n = 2
    while candidate.lower() in used:
        suffix = f" ({n})"
        candidate = base[: 31 - len(suffix)] + suffix
        n += 1
    used.add(candidate.lower())
    return candidate


def preview_workbook_bytes(preview) -> bytes:
    """Build a multi-sheet Excel workbook.

    Includes:
    - Summary (counts + config snapshot)
    - Teacher workload and subject totals
    - One sheet per course timetable
    - One sheet per teacher timetable
    """

    out = io.BytesIO()
    days = list(preview.days)
    used: set[str] = set()

    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        preview_summary_df(preview).to_excel(writer, sheet_name=_unique_sheet_name("Summary", used), index=False)
        teacher_workload_df(preview).to_excel(
            writer, sheet_name=_unique_sheet_name("Teacher Workload", used), index=False
        )
        subject_totals_df(preview).to_excel(writer, sheet_name=_unique_sheet_name("Subject Totals", used), index=False)

        for table in preview.courses:
            header_df = pd.DataFrame(
                [["COURSE", table.name], ["COURSE ID", table.table_id], ["SCHOOL", preview.school_name]],
                columns=["Field", "Value"],
            )
            sheet = _unique_sheet_name(table.name, used)
            header_df.to_excel(writer, sheet_name=sheet, index=False, startrow=0)
            preview_table_df(table, days).to_excel(writer, sheet_name=sheet, index=False, startrow=len(header_df) + 2)

        for table in preview.teachers:
            header_df = pd.DataFrame(
                [["TEACHER", table.name], ["TEACHER ID", table.table_id]],
                columns=["Field", "Value"],
            )
            sheet = _unique_sheet_name(f"Teacher-{table.name}", used)
            header_df.to_excel(writer, sheet_name=sheet, index=False, startrow=0)
            preview_table_df(table, days).to_excel(writer, sheet_name=sheet, index=False, startrow=len(header_df) + 2)

    logger.debug("Workbook built: %d course sheets, %d teacher sheets", len(preview.courses), len(preview.teachers))
    return out.getvalue()


def _file_stem(text: str) -> str:
    return "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in str(text)).strip("_") or "table"


def preview_zip_bytes(preview) -> bytes:
    """Create a ZIP with the workbook plus one CSV per course/teacher timetable."""

    days = list(preview.days)
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED) as z:
        z.writestr("schedule_preview.xlsx", preview_workbook_bytes(preview))
        z.writestr("tables/summary.csv", preview_summary_df(preview).to_csv(index=False).encode("utf-8"))
        z.writestr("tables/teacher_workload.csv", teacher_workload_df(preview).to_csv(index=False).encode("utf-8"))
        z.writestr("tables/subject_totals.csv", subject_totals_df(preview).to_csv(index=False).encode("utf-8"))

        for table in preview.courses:
            df = preview_table_df(table, days)
            z.writestr(
                f"timetables/courses/{_file_stem(table.table_id)}_{_file_stem(table.name)}.csv",
                df.to_csv(index=False).encode("utf-8"),
            )

        for table in preview.teachers:
            df = preview_table_df(table, days)
            z.writestr(
                f"timetables/teachers/{_file_stem(table.table_id)}.csv",
                df.to_csv(index=False).encode("utf-8"),
            )

    return buf.getvalue()


@dataclass(frozen=True)
class ImageExportOptions:
    title: Optional[str] = None
    font_size: int = 10
    cell_height: float = 0.35
    cell_width: float = 1.6


def df_to_markdown(df: pd.DataFrame) -> str:
    """Convert DataFrame to a GitHub-flavored Markdown table."""

    # pandas to_markdown needs tabulate; a table this simple does not.
    cols = list(df.columns)
    rows = df.astype(str).values.tolist()

    def esc(s: str) -> str:
        return str(s).replace("\n", " ").replace("|", "\\|")

    header = "| " + " | ".join(esc(c) for c in cols) + " |"
    sep = "| " + " | ".join(["---"] * len(cols)) + " |"
    body = ["| " + " | ".join(esc(v) for v in r) + " |" for r in rows]
    return "\n".join([header, sep] + body) + "\n"


def df_to_png_bytes(
    df: pd.DataFrame,
    *,
    options: ImageExportOptions = ImageExportOptions(),
    cell_colors: Optional[list[list[str]]] = None,
) -> bytes:
    """Render a DataFrame as a printable PNG image (bytes).

    `cell_colors` (same shape as df) paints body cells, e.g. with subject colors.
    """

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    nrows, ncols = df.shape

    fig_w = max(6.0, float(options.cell_width) * (ncols + 1))
    fig_h = max(2.0, float(options.cell_height) * (nrows + 2))

    fig, ax = plt.subplots(figsize=(fig_w, fig_h))
    ax.axis("off")

    if options.title:
        ax.set_title(options.title, fontsize=options.font_size + 2, pad=12)

    tbl = ax.table(
        cellText=df.values,
        colLabels=list(df.columns),
        cellLoc="center",
        loc="center",
    )

    tbl.auto_set_font_size(False)
    tbl.set_fontsize(options.font_size)
    tbl.scale(1.0, 1.4)

    for (r, c), cell in tbl.get_celld().items():
        cell.set_linewidth(0.6)
        if r == 0:
            cell.set_facecolor("#f0f2f6")
            cell.set_text_props(weight="bold")
        elif cell_colors is not None and cell_colors[r - 1][c]:
            cell.set_facecolor(cell_colors[r - 1][c])
            cell.set_alpha(0.35)

    buf = io.BytesIO()
    fig.tight_layout()
    fig.savefig(buf, format="png", dpi=200, bbox_inches="tight")
    plt.close(fig)
    return buf.getvalue()


def preview_table_colors(table, days: Sequence[str]) -> list[list[str]]:
    """Per-cell background colors matching `preview_table_df` (time column blank)."""

    out = []
    for row in table.rows:
        colors = [""]
        for cell in list(row.cells)[: len(days)]:
            colors.append(str(cell.color) if cell is not None and str(cell.color).startswith("#") else "")
        out.append(colors)
    return out
