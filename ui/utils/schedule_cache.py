from __future__ import annotations

import hashlib
import json
import logging
from typing import Any, Dict, MutableMapping, Optional, Sequence, Tuple


logger = logging.getLogger(__name__)

MAX_CACHED_PREVIEWS = 8


def _stable_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_preview_input_hash(
    *,
    courses: Sequence,
    subjects: Sequence,
    teachers: Sequence,
    config,
    mode: str = "full",
    course_id: Optional[str] = None,
) -> str:
    """Compute a stable hash for a preview run.

    Same master data + same config + same mode => same hash.
    List order is kept for subjects and teachers because placement order and
    teacher resolution depend on it.
    """

    payload: Dict[str, Any] = {
        "config": {
            "block_duration_minutes": int(getattr(config, "block_duration_minutes", 0) or 0),
            "day_start": str(getattr(config, "day_start", "") or ""),
            "lunch_start": getattr(config, "lunch_start", None),
            "lunch_duration_minutes": int(getattr(config, "lunch_duration_minutes", 0) or 0),
            "school_name": str(getattr(config, "school_name", "") or ""),
            "cycles": [
                {
                    "cycle_id": str(getattr(c, "cycle_id", "")),
                    "name": str(getattr(c, "name", "")),
                    "levels": list(getattr(c, "levels", ()) or ()),
                    "end_time": str(getattr(c, "end_time", "")),
                }
                for c in (getattr(config, "cycles", ()) or ())
            ],
        },
        "courses": [
            {"course_id": str(c.course_id), "name": str(c.name), "level": str(c.level)}
            for c in courses
        ],
        "subjects": [
            {
                "subject_id": str(s.subject_id),
                "name": str(s.name),
                "level": str(s.level),
                "weekly_blocks": int(s.weekly_blocks),
                "kind": str(s.kind),
                "color": str(s.color),
            }
            for s in subjects
        ],
        "teachers": [
            {
                "teacher_id": str(t.teacher_id),
                "name": str(t.name),
                "subject_names": list(t.subject_names),
                "contract_type": str(getattr(t, "contract_type", "") or ""),
                "weekly_hours": int(getattr(t, "weekly_hours", 0) or 0),
            }
            for t in teachers
        ],
        "mode": str(mode),
        "course_id": None if course_id is None else str(course_id),
    }

    return hashlib.sha256(_stable_json(payload).encode("utf-8")).hexdigest()


def get_or_build_preview(
    cache: MutableMapping[str, Any],
    *,
    courses: Sequence,
    subjects: Sequence,
    teachers: Sequence,
    config,
    mode: str = "full",
    course_id: Optional[str] = None,
) -> Tuple[Any, bool]:
    """Return (outcome, used_cache).

    `cache` is any mutable mapping; the preview page passes a dict kept in
    `st.session_state`. Oldest entries are evicted past MAX_CACHED_PREVIEWS.
    """

    from modules.weekly_preview import build_schedule_preview

    key = compute_preview_input_hash(
        courses=courses,
        subjects=subjects,
        teachers=teachers,
        config=config,
        mode=mode,
        course_id=course_id,
    )
    if key in cache:
        logger.debug("Preview cache hit %s", key[:12])
        return cache[key], True

    outcome = build_schedule_preview(courses, subjects, teachers, mode=mode, course_id=course_id, config=config)
    cache[key] = outcome
    while len(cache) > MAX_CACHED_PREVIEWS:
        oldest = next(iter(cache))
        del cache[oldest]
    return outcome, False
