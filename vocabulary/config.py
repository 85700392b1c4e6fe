"""Scheduler configuration loaded from environment variables."""

import logging
import os
from functools import lru_cache

from pydantic import BaseModel

from vocabulary.srs.sm2 import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR, SM2Scheduler

logger = logging.getLogger(__name__)


class SchedulerSettings(BaseModel):
    """Scheduling settings loaded from environment variables."""

    default_ease_factor: float = DEFAULT_EASE_FACTOR
    min_ease_factor: float = MIN_EASE_FACTOR
    due_review_limit: int = 0  # 0 = no limit on GET /review/due
    lock_ttl_seconds: int = 600  # How long an idle per-entry lock is kept

    def build_scheduler(self) -> SM2Scheduler:
        """Create a scheduler bound to these ease-factor constants."""
        return SM2Scheduler(
            default_ease_factor=self.default_ease_factor,
            min_ease_factor=self.min_ease_factor,
        )


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using default %s", name, raw, default)
        return default


@lru_cache()
def get_scheduler_settings() -> SchedulerSettings:
    """Get cached scheduler settings from environment variables."""
    settings = SchedulerSettings(
        default_ease_factor=_env_number("SRS_DEFAULT_EASE_FACTOR", DEFAULT_EASE_FACTOR, float),
        min_ease_factor=_env_number("SRS_MIN_EASE_FACTOR", MIN_EASE_FACTOR, float),
        due_review_limit=_env_number("SRS_DUE_LIMIT", 0, int),
        lock_ttl_seconds=_env_number("SRS_LOCK_TTL_SECONDS", 600, int),
    )
    if settings.min_ease_factor > settings.default_ease_factor:
        raise ValueError(
            "SRS_MIN_EASE_FACTOR must not exceed SRS_DEFAULT_EASE_FACTOR "
            f"({settings.min_ease_factor} > {settings.default_ease_factor})"
        )
    return settings
