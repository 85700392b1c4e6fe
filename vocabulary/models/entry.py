"""Vocabulary entry models for API requests and responses."""

from datetime import date
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from vocabulary.srs.sm2 import SchedulingState
from vocabulary.srs.time import utc_now_iso, utc_today


Category = Literal["VERBS", "NOUNS", "ADJECTIVES"]
CATEGORIES: tuple[Category, ...] = ("VERBS", "NOUNS", "ADJECTIVES")


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


class EntryBase(BaseModel):
    """Base entry model with common fields."""

    term: str = Field(..., min_length=1, max_length=200, description="Word or phrase being learned")
    translation: str = Field(..., min_length=1, max_length=200, description="Translation of the term")
    example: str | None = Field(None, max_length=1000, description="Example sentence using the term")
    category: Category = Field(..., description="Part of speech")
    level: int = Field(1, ge=1, le=10, description="Difficulty level")
    notes: str | None = Field(None, max_length=1000, description="Additional notes about the word")
    pronunciation: str | None = Field(None, max_length=200, description="Pronunciation guide")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")


class EntryCreate(EntryBase):
    """Model for creating a new entry."""

    pass


class VocabularyEntry(EntryBase):
    """Full entry model as stored in the database."""

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    createdAt: str = Field(default_factory=utc_now_iso, description="Creation timestamp")
    updatedAt: str = Field(default_factory=utc_now_iso, description="Last update timestamp")

    # SRS fields (persisted); unset until the first review
    nextReview: date = Field(default_factory=utc_today, description="Date on/after which the entry is due")
    repetitions: int | None = Field(None, description="Consecutive successful reviews")
    easeFactor: float | None = Field(None, description="SM-2 ease factor (min 1.3)")
    lastReviewDate: date | None = Field(None, description="Date of the most recent review")

    # Cosmos concurrency token of the document as read; never written back
    etag: str | None = Field(None, alias="_etag", exclude=True)

    class Config:
        """Pydantic config."""

        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174001",
                "term": "falar",
                "translation": "sprechen",
                "example": "Eu falo português.",
                "category": "VERBS",
                "level": 1,
                "tags": [],
                "createdAt": "2025-01-01T00:00:00Z",
                "updatedAt": "2025-01-01T00:00:00Z",
                "nextReview": "2025-01-01",
                "repetitions": None,
                "easeFactor": None,
                "lastReviewDate": None,
            }
        }

    def scheduling_state(self) -> SchedulingState:
        return SchedulingState(
            repetitions=self.repetitions,
            ease_factor=self.easeFactor,
            last_review_date=self.lastReviewDate,
            next_review_date=self.nextReview,
        )

    def apply_scheduling_state(self, state: SchedulingState) -> None:
        """Copy a scheduler result onto the entry (mutates in place)."""
        self.repetitions = state.repetitions
        self.easeFactor = state.ease_factor
        self.lastReviewDate = state.last_review_date
        if state.next_review_date is not None:
            self.nextReview = state.next_review_date
        self.updatedAt = utc_now_iso()


class EntryResponse(EntryBase):
    """Entry response model returned by API."""

    id: str
    createdAt: str
    updatedAt: str

    nextReview: date
    repetitions: int | None
    easeFactor: float | None
    lastReviewDate: date | None


class EntryListResponse(BaseModel):
    """Response containing a list of entries."""

    entries: list[EntryResponse]
    count: int
