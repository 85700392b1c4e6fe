"""Review orchestration: load state, schedule, persist, record history."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable

from azure.core.exceptions import AzureError

from vocabulary.config import get_scheduler_settings
from vocabulary.models import (
    CATEGORIES,
    SESSION_STATUSES,
    ReviewHistory,
    ReviewSession,
    ReviewSessionEntry,
    SessionStatus,
    VocabularyEntry,
)
from vocabulary.repositories import (
    EntryRepository,
    ReviewHistoryRepository,
    ReviewSessionRepository,
    get_entry_repository,
    get_review_history_repository,
    get_review_session_repository,
)
from vocabulary.services.locks import EntryLockRegistry
from vocabulary.srs.sm2 import ReviewEvent, SM2Scheduler, clamp_quality
from vocabulary.srs.time import utc_datetime_to_iso_z, utc_now, utc_today

logger = logging.getLogger(__name__)


class InvalidDateRangeError(ValueError):
    """Raised when a history range ends before it starts."""

    pass


class SessionClosedError(Exception):
    """Raised when a completed or abandoned session is modified."""

    pass


class SessionEntryNotFoundError(Exception):
    """Raised when an entry is not part of the session."""

    pass


class ReviewService:
    """Applies review results to vocabulary entries.

    The scheduler only computes; this service owns the read-modify-write
    cycle. Updates to the same entry are serialized through ``locks``;
    different entries proceed in parallel. Entry writes are also conditional
    on the ETag read, which covers writers in other processes.
    """

    def __init__(
        self,
        entry_repo: EntryRepository | None = None,
        history_repo: ReviewHistoryRepository | None = None,
        session_repo: ReviewSessionRepository | None = None,
        scheduler: SM2Scheduler | None = None,
        locks: EntryLockRegistry | None = None,
        clock: Callable[[], date] = utc_today,
        now: Callable[[], datetime] = utc_now,
        due_review_limit: int = 0,
    ):
        self._entry_repo = entry_repo
        self._history_repo = history_repo
        self._session_repo = session_repo
        self.scheduler = scheduler or SM2Scheduler()
        self.locks = locks or EntryLockRegistry()
        self._clock = clock
        self._now = now
        self.due_review_limit = due_review_limit

    @property
    def entry_repo(self) -> EntryRepository:
        if self._entry_repo is None:
            self._entry_repo = get_entry_repository()
        return self._entry_repo

    @property
    def history_repo(self) -> ReviewHistoryRepository:
        if self._history_repo is None:
            self._history_repo = get_review_history_repository()
        return self._history_repo

    @property
    def session_repo(self) -> ReviewSessionRepository:
        if self._session_repo is None:
            self._session_repo = get_review_session_repository()
        return self._session_repo

    def _timestamp(self) -> str:
        return utc_datetime_to_iso_z(self._now())

    def get_entries_due_for_review(
        self,
        limit: int | None = None,
        category: str | None = None,
        today: date | None = None,
    ) -> list[VocabularyEntry]:
        """Entries due on or before today, earliest first.

        Args:
            limit: Maximum number of entries; falls back to the configured
                limit (0 means unlimited)
            category: Optional part-of-speech filter

        Raises:
            ValueError: If the category is unknown or the limit is negative
        """
        if category is not None and category not in CATEGORIES:
            raise ValueError(f"Invalid category: {category}. Valid values are {', '.join(CATEGORIES)}")
        if limit is None:
            limit = self.due_review_limit
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")

        entries = self.entry_repo.list_due(today or self._clock(), category=category)
        return entries[:limit] if limit else entries

    def record_review_result(
        self,
        entry_id: str,
        quality_rating: int,
        notes: str | None = None,
        today: date | None = None,
    ) -> VocabularyEntry:
        """Schedule an entry after a review and append its history record.

        The entry is written before the history record. If the history write
        fails, the entry keeps its new schedule and the failure is logged with
        everything needed to append the missing record.

        Raises:
            EntryNotFoundError: If the entry does not exist
            ConcurrentUpdateError: If another process updated the entry meanwhile
        """
        today = today or self._clock()

        with self.locks.hold(entry_id):
            entry = self.entry_repo.get_by_id(entry_id)
            new_state = self.scheduler.process_review(entry.scheduling_state(), quality_rating, today)
            entry = self.entry_repo.store_state(entry, new_state)

            event = ReviewEvent(
                item_id=entry_id,
                review_date=today,
                quality_rating=clamp_quality(quality_rating),
                state=new_state,
            )
            try:
                self.history_repo.record(event, notes=notes)
            except AzureError:
                logger.error(
                    "History record missing for entry %s: review on %s with quality %s was applied "
                    "(repetitions=%s, ease_factor=%.2f, next_review=%s)",
                    entry_id,
                    today,
                    event.quality_rating,
                    new_state.repetitions,
                    new_state.ease_factor,
                    new_state.next_review_date,
                )
                raise

        logger.info(
            f"Review applied: entry={entry_id}, quality={event.quality_rating}, "
            f"repetitions={new_state.repetitions}, ease_factor={new_state.ease_factor:.2f}, "
            f"next_review={new_state.next_review_date}"
        )
        return entry

    def get_review_history(self, entry_id: str) -> list[ReviewHistory]:
        """History of an existing entry, newest first.

        Raises:
            EntryNotFoundError: If the entry does not exist
        """
        self.entry_repo.get_by_id(entry_id)
        return self.history_repo.list_by_entry(entry_id)

    def get_review_history_by_date_range(self, start: date, end: date) -> list[ReviewHistory]:
        """History records reviewed between start and end (inclusive).

        Raises:
            InvalidDateRangeError: If end is before start
        """
        if end < start:
            raise InvalidDateRangeError("End date cannot be before start date")
        return self.history_repo.list_by_date_range(start, end)

    # Review sessions

    def start_review_session(
        self,
        limit: int | None = None,
        category: str | None = None,
        today: date | None = None,
    ) -> ReviewSession:
        """Open a session over the entries currently due.

        Raises:
            ValueError: If the category is unknown or the limit is negative
        """
        entries = self.get_entries_due_for_review(limit=limit, category=category, today=today)
        started = self._timestamp()
        session = ReviewSession(
            startTime=started,
            createdAt=started,
            updatedAt=started,
            totalEntries=len(entries),
            entries=[ReviewSessionEntry(entryId=e.id, term=e.term) for e in entries],
        )
        session = self.session_repo.create(session)
        logger.info("Review session %s started with %d entries", session.id, session.totalEntries)
        return session

    def get_review_session(self, session_id: str) -> ReviewSession:
        """Raises SessionNotFoundError for unknown ids."""
        return self.session_repo.get_by_id(session_id)

    def update_review_result(
        self,
        session_id: str,
        entry_id: str,
        quality_rating: int,
        notes: str | None = None,
    ) -> ReviewSession:
        """Review an entry of an open session and mark it reviewed.

        The entry is rescheduled through ``record_review_result`` first, so a
        failed review leaves the session unchanged.

        Raises:
            SessionNotFoundError: If the session does not exist
            SessionClosedError: If the session is completed or abandoned
            SessionEntryNotFoundError: If the entry is not in the session
            EntryNotFoundError: If the entry no longer exists
        """
        with self.locks.hold(f"session:{session_id}"):
            session = self.session_repo.get_by_id(session_id)
            if not session.is_open:
                raise SessionClosedError(f"Review session {session_id} is {session.status}")
            if session.find_entry(entry_id) is None:
                raise SessionEntryNotFoundError(
                    f"Vocabulary entry {entry_id} is not part of review session {session_id}"
                )

            self.record_review_result(entry_id, quality_rating, notes=notes)
            session.mark_reviewed(entry_id, clamp_quality(quality_rating), self._timestamp())
            return self.session_repo.replace(session)

    def complete_review_session(self, session_id: str) -> ReviewSession:
        return self._close_session(session_id, "COMPLETED")

    def abandon_review_session(self, session_id: str) -> ReviewSession:
        return self._close_session(session_id, "ABANDONED")

    def _close_session(self, session_id: str, status: SessionStatus) -> ReviewSession:
        with self.locks.hold(f"session:{session_id}"):
            session = self.session_repo.get_by_id(session_id)
            if not session.is_open:
                raise SessionClosedError(f"Review session {session_id} is already {session.status}")
            session.close(status, self._timestamp())
            session = self.session_repo.replace(session)

        logger.info(
            "Review session %s %s after %d of %d entries",
            session_id,
            status.lower(),
            session.completedEntries,
            session.totalEntries,
        )
        return session

    def get_review_sessions_by_status(self, status: str) -> list[ReviewSession]:
        """Raises ValueError for an unknown status."""
        if status not in SESSION_STATUSES:
            raise ValueError(f"Invalid status: {status}. Valid values are {', '.join(SESSION_STATUSES)}")
        return self.session_repo.list_by_status(status)

    def get_review_sessions_by_date_range(self, start: datetime, end: datetime) -> list[ReviewSession]:
        """Sessions started between start and end (inclusive).

        Raises:
            InvalidDateRangeError: If end is before start
        """
        start_iso = utc_datetime_to_iso_z(start)
        end_iso = utc_datetime_to_iso_z(end)
        if end_iso < start_iso:
            raise InvalidDateRangeError("End date cannot be before start date")
        return self.session_repo.list_by_start_time(start_iso, end_iso)


# Singleton instance
_review_service: ReviewService | None = None


def get_review_service() -> ReviewService:
    """Get the review service singleton, configured from the environment."""
    global _review_service
    if _review_service is None:
        settings = get_scheduler_settings()
        _review_service = ReviewService(
            scheduler=settings.build_scheduler(),
            locks=EntryLockRegistry(ttl_seconds=settings.lock_ttl_seconds),
            due_review_limit=settings.due_review_limit,
        )
    return _review_service
