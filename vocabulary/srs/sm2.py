"""SM-2 scheduling for vocabulary entries.

The scheduler is a pure function of (state, quality, today). It never reads the
clock and never touches storage; callers load the state, call
``process_review`` and persist/record the result themselves.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

from .time import add_days, days_between


DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3

MIN_QUALITY = 0
MAX_QUALITY = 5
# Ratings at or above this count as a successful recall
PASSING_QUALITY = 3


@dataclass(frozen=True)
class SchedulingState:
    """Scheduling fields carried per vocabulary entry.

    ``repetitions``, ``ease_factor`` and ``last_review_date`` are None for an
    entry that has never been reviewed. Every state returned by the scheduler
    has all four fields set.
    """

    repetitions: int | None = None
    ease_factor: float | None = None
    last_review_date: date | None = None
    next_review_date: date | None = None

    @property
    def is_learning(self) -> bool:
        """True for new entries and entries whose last review failed."""
        return not self.repetitions


@dataclass(frozen=True)
class ReviewEvent:
    """Immutable record of one applied review, handed to the review recorder."""

    item_id: str
    review_date: date
    quality_rating: int
    state: SchedulingState


def clamp_quality(quality: int) -> int:
    """Coerce a quality rating into [0, 5]."""
    return max(MIN_QUALITY, min(MAX_QUALITY, int(quality)))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SM2Scheduler:
    """SuperMemo-2 scheduler with configurable ease-factor bounds."""

    def __init__(
        self,
        default_ease_factor: float = DEFAULT_EASE_FACTOR,
        min_ease_factor: float = MIN_EASE_FACTOR,
    ):
        if min_ease_factor > default_ease_factor:
            raise ValueError(
                f"min_ease_factor ({min_ease_factor}) must not exceed "
                f"default_ease_factor ({default_ease_factor})"
            )
        self.default_ease_factor = default_ease_factor
        self.min_ease_factor = min_ease_factor

    def normalize(self, state: SchedulingState | None) -> tuple[int, float]:
        """Return (repetitions, ease_factor) with defaults and floors applied.

        Foreign or corrupted values are tolerated: negative repetitions become 0
        and an ease factor below the minimum is raised to the minimum.
        """
        if state is None:
            return 0, self.default_ease_factor

        repetitions = max(0, state.repetitions or 0)
        ease_factor = state.ease_factor if state.ease_factor is not None else self.default_ease_factor
        return repetitions, max(self.min_ease_factor, ease_factor)

    def next_ease_factor(self, ease_factor: float, quality: int) -> float:
        """EF' = EF + (0.1 - (5-q)*(0.08 + (5-q)*0.02)), floored at the minimum."""
        q = clamp_quality(quality)
        ef_prime = ease_factor + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        return max(self.min_ease_factor, ef_prime)

    def next_interval(self, repetitions: int, ease_factor: float, previous_interval: int) -> int:
        """Days until the next review after a successful recall.

        ``repetitions`` is the count *before* this review. The result is never
        below one day, even when the previous interval is zero or negative.
        """
        if repetitions <= 0:
            return 1
        if repetitions == 1:
            return 6
        return max(1, _round_half_up(previous_interval * ease_factor))

    def calculate_next_review_date(
        self, repetitions: int, ease_factor: float, previous_interval: int, today: date
    ) -> date:
        return add_days(today, self.next_interval(repetitions, ease_factor, previous_interval))

    def process_review(self, state: SchedulingState | None, quality_rating: int, today: date) -> SchedulingState:
        """Apply one review to ``state`` and return the new state.

        Rules:
        - quality is clamped into [0, 5], never rejected
        - if q < 3: repetitions = 0, ease factor unchanged, interval = 1
        - else: EF is recomputed and the interval follows the repetitions seen
          so far (0 -> 1 day, 1 -> 6 days, later -> previous interval * EF')
        - the previous interval is the number of days since lastReviewDate
          (0 for a never-reviewed entry)
        """
        q = clamp_quality(quality_rating)
        repetitions, ease_factor = self.normalize(state)

        last_review_date = state.last_review_date if state is not None else None
        previous_interval = days_between(last_review_date, today) if last_review_date is not None else 0

        if q < PASSING_QUALITY:
            new_repetitions = 0
            new_ease_factor = ease_factor
            interval = 1
        else:
            new_ease_factor = self.next_ease_factor(ease_factor, q)
            interval = self.next_interval(repetitions, new_ease_factor, previous_interval)
            new_repetitions = repetitions + 1

        return SchedulingState(
            repetitions=new_repetitions,
            ease_factor=new_ease_factor,
            last_review_date=today,
            next_review_date=add_days(today, interval),
        )


_default_scheduler = SM2Scheduler()


def process_review(state: SchedulingState | None, quality_rating: int, today: date) -> SchedulingState:
    """Apply a review using the default SM-2 constants."""
    return _default_scheduler.process_review(state, quality_rating, today)
