"""Services coordinating the scheduler with storage."""

from .locks import EntryLockRegistry
from .review_service import (
    InvalidDateRangeError,
    ReviewService,
    SessionClosedError,
    SessionEntryNotFoundError,
    get_review_service,
)

__all__ = [
    "EntryLockRegistry",
    "InvalidDateRangeError",
    "ReviewService",
    "SessionClosedError",
    "SessionEntryNotFoundError",
    "get_review_service",
]
