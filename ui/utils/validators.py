"""Validation helpers for Streamlit forms."""

from __future__ import annotations

import re
from typing import Iterable, Tuple


_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def require_non_empty(value: str, field: str) -> Tuple[bool, str]:
    if not value or not value.strip():
        return False, f"{field} cannot be empty"
    return True, ""


def validate_positive_int(value: int, field: str, min_value: int = 1, max_value: int | None = None) -> Tuple[bool, str]:
    if value is None:
        return False, f"{field} is required"
    if value < min_value:
        return False, f"{field} must be >= {min_value}"
    if max_value is not None and value > max_value:
        return False, f"{field} must be <= {max_value}"
    return True, ""


def validate_unique(values: Iterable[str], field: str) -> Tuple[bool, str]:
    vals = [v.strip().lower() for v in values if v and v.strip()]
    if len(vals) != len(set(vals)):
        return False, f"{field} contains duplicates"
    return True, ""


def validate_choice(value: str, field: str, allowed: Iterable[str]) -> Tuple[bool, str]:
    ok, msg = require_non_empty(value, field)
    if not ok:
        return ok, msg
    allowed_set = {str(x) for x in allowed}
    if str(value) not in allowed_set:
        return False, f"{field} must be one of: {', '.join(sorted(allowed_set))}"
    return True, ""


def validate_clock_time(value: str, field: str) -> Tuple[bool, str]:
    """Accept 24h "HH:MM" only.

    The preview engine tolerates malformed clock strings (it never raises), so
    forms reject them here before they reach the DB.
    """

    ok, msg = require_non_empty(value, field)
    if not ok:
        return ok, msg
    if not _CLOCK_RE.match(value.strip()):
        return False, f"{field} must be a 24h time like 08:00"
    return True, ""


def validate_color(value: str, field: str) -> Tuple[bool, str]:
    ok, msg = require_non_empty(value, field)
    if not ok:
        return ok, msg
    if not _COLOR_RE.match(value.strip()):
        return False, f"{field} must be a hex color like #3b82f6"
    return True, ""


def validate_cycle_window(*, day_start: str, end_time: str) -> Tuple[bool, str]:
    """A cycle must end after the school day starts."""

    for field, value in [("Day start", day_start), ("End time", end_time)]:
        ok, msg = validate_clock_time(value, field)
        if not ok:
            return ok, msg
    sh, sm = (int(x) for x in day_start.strip().split(":"))
    eh, em = (int(x) for x in end_time.strip().split(":"))
    if eh * 60 + em <= sh * 60 + sm:
        return False, f"End time ({end_time}) must be after day start ({day_start})"
    return True, ""
