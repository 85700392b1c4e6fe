"""Repositories module for data access layer."""

from .entry_repository import (
    ConcurrentUpdateError,
    EntryRepository,
    EntryNotFoundError,
    get_entry_repository,
)
from .review_history_repository import (
    ReviewHistoryRepository,
    get_review_history_repository,
)
from .review_session_repository import (
    ReviewSessionRepository,
    SessionNotFoundError,
    get_review_session_repository,
)

__all__ = [
    "ConcurrentUpdateError",
    "EntryRepository",
    "EntryNotFoundError",
    "get_entry_repository",
    "ReviewHistoryRepository",
    "get_review_history_repository",
    "ReviewSessionRepository",
    "SessionNotFoundError",
    "get_review_session_repository",
]
