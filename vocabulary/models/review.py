"""Models for review submission and review history."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from vocabulary.models.entry import EntryResponse, generate_uuid
from vocabulary.srs.grading import Grade, quality_for_grade, validate_quality_rating
from vocabulary.srs.sm2 import ReviewEvent
from vocabulary.srs.time import utc_now_iso


class ReviewResultRequest(BaseModel):
    """Body for POST /review/{entry_id} and POST /sessions/{session_id}/entries/{entry_id}.

    Exactly one of qualityRating or grade must be given. Out-of-range ratings
    are rejected here even though the scheduler would clamp them.
    """

    qualityRating: int | None = Field(
        None,
        description="Quality rating of the review (0-5, 0=complete blackout, 5=perfect recall)",
    )
    grade: Grade | None = Field(None, description="Named grade, mapped to a quality rating")
    notes: str | None = Field(None, max_length=1000, description="Optional notes about the review")

    @field_validator("qualityRating")
    @classmethod
    def _rating_in_range(cls, value: int | None) -> int | None:
        if value is None:
            return value
        return validate_quality_rating(value)

    @model_validator(mode="after")
    def _exactly_one_rating(self) -> "ReviewResultRequest":
        if (self.qualityRating is None) == (self.grade is None):
            raise ValueError("Provide exactly one of qualityRating or grade")
        return self

    def quality(self) -> int:
        if self.qualityRating is not None:
            return self.qualityRating
        return quality_for_grade(self.grade)


class ReviewHistory(BaseModel):
    """Immutable review history record as stored in the database."""

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    entryId: str = Field(..., description="Reviewed entry ID (partition key)")
    reviewDate: date = Field(..., description="Date of the review")
    qualityRating: int = Field(..., description="Quality rating applied (0-5)")
    notes: str | None = Field(None, description="Optional notes about the review")
    repetitions: int = Field(..., description="Repetitions after the review")
    easeFactor: float = Field(..., description="Ease factor after the review")
    nextReviewDate: date = Field(..., description="Next review date after the review")
    createdAt: str = Field(default_factory=utc_now_iso, description="Creation timestamp")

    @classmethod
    def from_event(cls, event: ReviewEvent, notes: str | None = None) -> "ReviewHistory":
        return cls(
            entryId=event.item_id,
            reviewDate=event.review_date,
            qualityRating=event.quality_rating,
            notes=notes,
            repetitions=event.state.repetitions,
            easeFactor=event.state.ease_factor,
            nextReviewDate=event.state.next_review_date,
        )


class ReviewResultResponse(BaseModel):
    """Response for POST /review/{entry_id}."""

    entry: EntryResponse
    qualityRating: int
    nextReview: date


class ReviewHistoryListResponse(BaseModel):
    """Response containing review history records."""

    history: list[ReviewHistory]
    count: int
