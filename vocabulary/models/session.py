"""Review session models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from vocabulary.models.entry import Category, generate_uuid
from vocabulary.srs.time import utc_now_iso


SessionStatus = Literal["IN_PROGRESS", "COMPLETED", "ABANDONED"]
SESSION_STATUSES: tuple[SessionStatus, ...] = ("IN_PROGRESS", "COMPLETED", "ABANDONED")


class ReviewSessionEntry(BaseModel):
    """One entry scheduled into a session and its outcome, if reviewed."""

    entryId: str
    term: str
    reviewed: bool = False
    qualityRating: int | None = None
    reviewTime: str | None = None


class ReviewSession(BaseModel):
    """A batch of due entries reviewed together, as stored in the database."""

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    status: SessionStatus = Field("IN_PROGRESS", description="Session lifecycle state")
    startTime: str = Field(default_factory=utc_now_iso, description="When the session was started")
    endTime: str | None = Field(None, description="When the session was completed or abandoned")
    totalEntries: int = Field(0, ge=0, description="Number of entries in the session")
    completedEntries: int = Field(0, ge=0, description="Number of entries reviewed so far")
    entries: list[ReviewSessionEntry] = Field(default_factory=list)
    createdAt: str = Field(default_factory=utc_now_iso, description="Creation timestamp")
    updatedAt: str = Field(default_factory=utc_now_iso, description="Last update timestamp")

    etag: str | None = Field(None, alias="_etag", exclude=True)

    class Config:
        """Pydantic config."""

        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "5b0c3d52-54a4-4a8e-9bb8-1c6f0a5f8d11",
                "status": "IN_PROGRESS",
                "startTime": "2025-01-06T08:30:00Z",
                "endTime": None,
                "totalEntries": 2,
                "completedEntries": 1,
                "entries": [
                    {
                        "entryId": "123e4567-e89b-12d3-a456-426614174001",
                        "term": "falar",
                        "reviewed": True,
                        "qualityRating": 4,
                        "reviewTime": "2025-01-06T08:31:12Z",
                    },
                    {
                        "entryId": "123e4567-e89b-12d3-a456-426614174002",
                        "term": "casa",
                        "reviewed": False,
                        "qualityRating": None,
                        "reviewTime": None,
                    },
                ],
                "createdAt": "2025-01-06T08:30:00Z",
                "updatedAt": "2025-01-06T08:31:12Z",
            }
        }

    @property
    def is_open(self) -> bool:
        return self.status == "IN_PROGRESS"

    def find_entry(self, entry_id: str) -> ReviewSessionEntry | None:
        for item in self.entries:
            if item.entryId == entry_id:
                return item
        return None

    def mark_reviewed(self, entry_id: str, quality_rating: int, at: str) -> None:
        """Record the outcome for an entry; reviewing it again overwrites it."""
        item = self.find_entry(entry_id)
        if item is None:
            raise KeyError(entry_id)
        item.reviewed = True
        item.qualityRating = quality_rating
        item.reviewTime = at
        self.completedEntries = sum(1 for i in self.entries if i.reviewed)
        self.updatedAt = at

    def close(self, status: SessionStatus, at: str) -> None:
        self.status = status
        self.endTime = at
        self.updatedAt = at


class StartSessionRequest(BaseModel):
    """Body for POST /sessions."""

    limit: int | None = Field(None, ge=1, description="Maximum number of entries in the session")
    category: Category | None = Field(None, description="Only entries of this category")


class ReviewSessionListResponse(BaseModel):
    """Response containing review sessions."""

    sessions: list[ReviewSession]
    count: int
