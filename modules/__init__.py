"""Scheduling modules (weekly schedule preview)."""

from .weekly_preview import (
	NO_TEACHER,
	WORKING_DAYS,
	Course,
	CourseCapacity,
	CourseGrid,
	Cycle,
	PreviewCell,
	PreviewConfig,
	PreviewError,
	PreviewOutcome,
	PreviewRow,
	PreviewTable,
	SchedulePreview,
	ScheduleRow,
	SlotCell,
	Subject,
	Teacher,
	aggregate_teacher_tables,
	build_schedule_preview,
	build_schedule_structure,
	compute_course_capacity,
	distribute_course_sessions,
	minutes_to_range,
	minutes_to_time,
	time_to_minutes,
)

__all__ = [
	"NO_TEACHER",
	"WORKING_DAYS",
	"Course",
	"CourseCapacity",
	"CourseGrid",
	"Cycle",
	"PreviewCell",
	"PreviewConfig",
	"PreviewError",
	"PreviewOutcome",
	"PreviewRow",
	"PreviewTable",
	"SchedulePreview",
	"ScheduleRow",
	"SlotCell",
	"Subject",
	"Teacher",
	"aggregate_teacher_tables",
	"build_schedule_preview",
	"build_schedule_structure",
	"compute_course_capacity",
	"distribute_course_sessions",
	"minutes_to_range",
	"minutes_to_time",
	"time_to_minutes",
]
