"""Entries API router."""

from fastapi import APIRouter, HTTPException, status

from vocabulary.models import EntryCreate, EntryResponse
from vocabulary.repositories import EntryNotFoundError, get_entry_repository

router = APIRouter(prefix="/entries", tags=["entries"])


@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
def create_entry(entry_create: EntryCreate) -> EntryResponse:
    """Create a new vocabulary entry, due for review today."""
    repo = get_entry_repository()
    entry = repo.create(entry_create)
    return EntryResponse(**entry.model_dump())


@router.get("/{entry_id}", response_model=EntryResponse)
def get_entry(entry_id: str) -> EntryResponse:
    """Get a specific entry by ID, including its scheduling state."""
    repo = get_entry_repository()
    try:
        entry = repo.get_by_id(entry_id)
    except EntryNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Vocabulary entry with ID {entry_id} not found",
        )
    return EntryResponse(**entry.model_dump())
