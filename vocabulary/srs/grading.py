"""Boundary helpers for turning client input into SM-2 quality ratings.

The scheduler itself clamps any integer into [0, 5]. The functions here are
the strict layer used at the API edge: they reject what the scheduler would
silently coerce.
"""

from __future__ import annotations

from typing import Literal

from .sm2 import MAX_QUALITY, MIN_QUALITY


Grade = Literal["again", "hard", "good", "easy"]


GRADE_TO_QUALITY: dict[Grade, int] = {
    "again": 0,
    "hard": 3,
    "good": 4,
    "easy": 5,
}


def quality_for_grade(grade: Grade) -> int:
    """Map a named grade to its quality rating.

    Raises:
        ValueError: If the grade is not one of again/hard/good/easy
    """
    try:
        return GRADE_TO_QUALITY[grade]
    except KeyError:
        raise ValueError(f"Invalid grade: {grade}") from None


def validate_quality_rating(quality: int) -> int:
    """Return ``quality`` unchanged if it is a rating in [0, 5].

    Raises:
        ValueError: If the rating is out of range
    """
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise ValueError(f"Quality rating must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}")
    return quality
