"""UI utilities (validators, id generation, preview cache)."""

from .id_generator import generate_course_id, generate_cycle_id, generate_subject_id, generate_teacher_id

__all__ = ["generate_course_id", "generate_cycle_id", "generate_subject_id", "generate_teacher_id"]
