"""Review (SRS) API router."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from vocabulary.models import (
    Category,
    EntryListResponse,
    EntryResponse,
    ReviewHistoryListResponse,
    ReviewResultRequest,
    ReviewResultResponse,
)
from vocabulary.repositories import ConcurrentUpdateError, EntryNotFoundError
from vocabulary.services import InvalidDateRangeError, get_review_service

router = APIRouter(prefix="/review", tags=["review"])


def _entry_not_found(entry_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Vocabulary entry with ID {entry_id} not found",
    )


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/due", response_model=EntryListResponse)
def list_due_entries(
    limit: int | None = Query(None, ge=1, description="Maximum number of entries"),
    category: Category | None = Query(None, description="Only entries of this category"),
) -> EntryListResponse:
    """List entries due for review today."""
    service = get_review_service()
    entries = service.get_entries_due_for_review(limit=limit, category=category)
    return EntryListResponse(
        entries=[EntryResponse(**entry.model_dump()) for entry in entries],
        count=len(entries),
    )


@router.get("/history", response_model=ReviewHistoryListResponse)
def list_history_by_date_range(
    start: date = Query(..., description="First review date (inclusive)"),
    end: date = Query(..., description="Last review date (inclusive)"),
) -> ReviewHistoryListResponse:
    """List review history records within a date range."""
    service = get_review_service()
    try:
        history = service.get_review_history_by_date_range(start, end)
    except InvalidDateRangeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ReviewHistoryListResponse(history=history, count=len(history))


@router.post("/{entry_id}", response_model=ReviewResultResponse)
def submit_review(entry_id: str, req: ReviewResultRequest) -> ReviewResultResponse:
    """Record a review result and reschedule the entry."""
    service = get_review_service()
    quality = req.quality()
    try:
        entry = service.record_review_result(entry_id, quality, notes=req.notes)
    except EntryNotFoundError:
        raise _entry_not_found(entry_id)
    except ConcurrentUpdateError as e:
        raise _conflict(e)
    return ReviewResultResponse(
        entry=EntryResponse(**entry.model_dump()),
        qualityRating=quality,
        nextReview=entry.nextReview,
    )


@router.get("/{entry_id}/history", response_model=ReviewHistoryListResponse)
def list_entry_history(entry_id: str) -> ReviewHistoryListResponse:
    """List the review history of one entry, newest first."""
    service = get_review_service()
    try:
        history = service.get_review_history(entry_id)
    except EntryNotFoundError:
        raise _entry_not_found(entry_id)
    return ReviewHistoryListResponse(history=history, count=len(history))
