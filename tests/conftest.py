"""Pytest configuration and fixtures."""

import itertools
import os
import threading
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

import pytest

# Keep tests off any real Cosmos DB account
os.environ.setdefault("COSMOS_ENDPOINT", "")
os.environ.setdefault("COSMOS_EMULATOR", "false")

from vocabulary.models import EntryCreate, ReviewHistory, ReviewSession, VocabularyEntry
from vocabulary.repositories import ConcurrentUpdateError, EntryNotFoundError, SessionNotFoundError
from vocabulary.services import EntryLockRegistry, ReviewService
from vocabulary.srs.sm2 import ReviewEvent, SchedulingState, SM2Scheduler


TODAY = date(2025, 1, 6)
NOW = datetime(2025, 1, 6, 8, 30, tzinfo=timezone.utc)


@dataclass
class StubEntryRepo:
    """In-memory stand-in for EntryRepository, with ETag checks on writes."""

    entries: dict[str, VocabularyEntry] = field(default_factory=dict)
    # Widens the read-modify-write window to expose unsynchronized updates
    load_delay: float = 0.0
    _versions: itertools.count = field(default_factory=lambda: itertools.count(1))

    def _save(self, entry: VocabularyEntry) -> VocabularyEntry:
        entry.etag = f'"{next(self._versions)}"'
        self.entries[entry.id] = entry
        return entry.model_copy()

    def add(self, entry_id: str, **fields) -> VocabularyEntry:
        data = {"term": "falar", "translation": "sprechen", "category": "VERBS", "nextReview": TODAY}
        data.update(fields)
        return self._save(VocabularyEntry(id=entry_id, **data))

    def get_by_id(self, entry_id: str) -> VocabularyEntry:
        if entry_id not in self.entries:
            raise EntryNotFoundError(f"Vocabulary entry with ID {entry_id} not found")
        entry = self.entries[entry_id].model_copy()
        if self.load_delay:
            time.sleep(self.load_delay)
        return entry

    def create(self, entry_create: EntryCreate, today: date | None = None) -> VocabularyEntry:
        return self._save(VocabularyEntry(**entry_create.model_dump(), nextReview=today or TODAY))

    def store_state(self, entry: VocabularyEntry, state: SchedulingState) -> VocabularyEntry:
        current = self.entries.get(entry.id)
        if current is None:
            raise EntryNotFoundError(f"Vocabulary entry with ID {entry.id} not found")
        if entry.etag != current.etag:
            raise ConcurrentUpdateError(f"Vocabulary entry {entry.id} was modified concurrently")
        updated = entry.model_copy()
        updated.apply_scheduling_state(state)
        return self._save(updated)

    def list_due(self, today: date, category: str | None = None) -> list[VocabularyEntry]:
        due = [
            e for e in self.entries.values()
            if e.nextReview <= today and (category is None or e.category == category)
        ]
        return sorted(due, key=lambda e: e.nextReview)


@dataclass
class StubHistoryRepo:
    """In-memory stand-in for ReviewHistoryRepository."""

    records: list[ReviewHistory] = field(default_factory=list)
    # Raised by record() when set
    failure: Exception | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def record(self, event: ReviewEvent, notes: str | None = None) -> ReviewHistory:
        if self.failure is not None:
            raise self.failure
        history = ReviewHistory.from_event(event, notes=notes)
        with self._lock:
            self.records.append(history)
        return history

    def list_by_entry(self, entry_id: str) -> list[ReviewHistory]:
        return [r for r in reversed(self.records) if r.entryId == entry_id]

    def list_by_date_range(self, start: date, end: date) -> list[ReviewHistory]:
        return [r for r in self.records if start <= r.reviewDate <= end]


@dataclass
class StubSessionRepo:
    """In-memory stand-in for ReviewSessionRepository."""

    sessions: dict[str, ReviewSession] = field(default_factory=dict)

    def get_by_id(self, session_id: str) -> ReviewSession:
        if session_id not in self.sessions:
            raise SessionNotFoundError(f"Review session with ID {session_id} not found")
        return self.sessions[session_id].model_copy(deep=True)

    def create(self, session: ReviewSession) -> ReviewSession:
        self.sessions[session.id] = session.model_copy(deep=True)
        return session.model_copy(deep=True)

    def replace(self, session: ReviewSession) -> ReviewSession:
        return self.create(session)

    def list_by_status(self, status: str) -> list[ReviewSession]:
        return [s for s in self.sessions.values() if s.status == status]

    def list_by_start_time(self, start: str, end: str) -> list[ReviewSession]:
        return [s for s in self.sessions.values() if start <= s.startTime <= end]


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def entry_repo() -> StubEntryRepo:
    return StubEntryRepo()


@pytest.fixture
def history_repo() -> StubHistoryRepo:
    return StubHistoryRepo()


@pytest.fixture
def session_repo() -> StubSessionRepo:
    return StubSessionRepo()


@pytest.fixture
def review_service(entry_repo, history_repo, session_repo) -> ReviewService:
    """ReviewService wired to in-memory repositories and a fixed clock."""
    return ReviewService(
        entry_repo=entry_repo,
        history_repo=history_repo,
        session_repo=session_repo,
        scheduler=SM2Scheduler(),
        locks=EntryLockRegistry(),
        clock=lambda: TODAY,
        now=lambda: NOW,
    )
