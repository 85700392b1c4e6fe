"""Models module for Pydantic schemas."""

from .entry import (
    CATEGORIES,
    Category,
    EntryBase,
    EntryCreate,
    EntryListResponse,
    EntryResponse,
    VocabularyEntry,
)
from .review import (
    ReviewHistory,
    ReviewHistoryListResponse,
    ReviewResultRequest,
    ReviewResultResponse,
)
from .session import (
    SESSION_STATUSES,
    ReviewSession,
    ReviewSessionEntry,
    ReviewSessionListResponse,
    SessionStatus,
    StartSessionRequest,
)

__all__ = [
    "CATEGORIES",
    "Category",
    "EntryBase",
    "EntryCreate",
    "EntryListResponse",
    "EntryResponse",
    "VocabularyEntry",
    "ReviewHistory",
    "ReviewHistoryListResponse",
    "ReviewResultRequest",
    "ReviewResultResponse",
    "SESSION_STATUSES",
    "ReviewSession",
    "ReviewSessionEntry",
    "ReviewSessionListResponse",
    "SessionStatus",
    "StartSessionRequest",
]
