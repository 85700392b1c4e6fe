"""Review session API router."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, status

from vocabulary.models import (
    ReviewResultRequest,
    ReviewSession,
    ReviewSessionListResponse,
    SessionStatus,
    StartSessionRequest,
)
from vocabulary.repositories import ConcurrentUpdateError, EntryNotFoundError, SessionNotFoundError
from vocabulary.services import (
    InvalidDateRangeError,
    SessionClosedError,
    SessionEntryNotFoundError,
    get_review_service,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _session_not_found(session_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Review session with ID {session_id} not found",
    )


@router.post("", response_model=ReviewSession, status_code=status.HTTP_201_CREATED)
def start_session(req: StartSessionRequest | None = None) -> ReviewSession:
    """Start a session over the entries due today."""
    req = req or StartSessionRequest()
    service = get_review_service()
    return service.start_review_session(limit=req.limit, category=req.category)


@router.get("", response_model=ReviewSessionListResponse)
def list_sessions_by_status(
    status_filter: SessionStatus = Query("IN_PROGRESS", alias="status", description="Session status"),
) -> ReviewSessionListResponse:
    """List sessions in a given status."""
    sessions = get_review_service().get_review_sessions_by_status(status_filter)
    return ReviewSessionListResponse(sessions=sessions, count=len(sessions))


@router.get("/by-date", response_model=ReviewSessionListResponse)
def list_sessions_by_date_range(
    start: datetime = Query(..., description="Earliest start time (inclusive)"),
    end: datetime = Query(..., description="Latest start time (inclusive)"),
) -> ReviewSessionListResponse:
    """List sessions started within a time range."""
    service = get_review_service()
    try:
        sessions = service.get_review_sessions_by_date_range(start, end)
    except InvalidDateRangeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ReviewSessionListResponse(sessions=sessions, count=len(sessions))


@router.get("/{session_id}", response_model=ReviewSession)
def get_session(session_id: str) -> ReviewSession:
    try:
        return get_review_service().get_review_session(session_id)
    except SessionNotFoundError:
        raise _session_not_found(session_id)


@router.post("/{session_id}/entries/{entry_id}", response_model=ReviewSession)
def review_session_entry(session_id: str, entry_id: str, req: ReviewResultRequest) -> ReviewSession:
    """Review one entry of the session and reschedule it."""
    service = get_review_service()
    try:
        return service.update_review_result(session_id, entry_id, req.quality(), notes=req.notes)
    except SessionNotFoundError:
        raise _session_not_found(session_id)
    except (SessionEntryNotFoundError, EntryNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (SessionClosedError, ConcurrentUpdateError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.put("/{session_id}/complete", response_model=ReviewSession)
def complete_session(session_id: str) -> ReviewSession:
    try:
        return get_review_service().complete_review_session(session_id)
    except SessionNotFoundError:
        raise _session_not_found(session_id)
    except (SessionClosedError, ConcurrentUpdateError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.put("/{session_id}/abandon", response_model=ReviewSession)
def abandon_session(session_id: str) -> ReviewSession:
    try:
        return get_review_service().abandon_review_session(session_id)
    except SessionNotFoundError:
        raise _session_not_found(session_id)
    except (SessionClosedError, ConcurrentUpdateError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
