"""SRS helpers (SM-2 scheduling + date handling)."""

from .sm2 import (
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    ReviewEvent,
    SchedulingState,
    SM2Scheduler,
    clamp_quality,
    process_review,
)
from .grading import Grade, quality_for_grade, validate_quality_rating
from .time import (
    utc_now,
    utc_today,
    utc_now_iso,
    utc_datetime_to_iso_z,
    parse_iso_date,
    date_to_iso,
    add_days,
    days_between,
)

__all__ = [
    "DEFAULT_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "ReviewEvent",
    "SchedulingState",
    "SM2Scheduler",
    "clamp_quality",
    "process_review",
    "Grade",
    "quality_for_grade",
    "validate_quality_rating",
    "utc_now",
    "utc_today",
    "utc_now_iso",
    "utc_datetime_to_iso_z",
    "parse_iso_date",
    "date_to_iso",
    "add_days",
    "days_between",
]
