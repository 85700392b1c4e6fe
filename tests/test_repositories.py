"""Tests for the Cosmos-backed repositories (container mocked)."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from azure.core import MatchConditions
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosResourceNotFoundError

from vocabulary.models import EntryCreate, ReviewSession, ReviewSessionEntry, VocabularyEntry
from vocabulary.repositories import (
    ConcurrentUpdateError,
    EntryNotFoundError,
    EntryRepository,
    ReviewHistoryRepository,
    ReviewSessionRepository,
    SessionNotFoundError,
)
from vocabulary.srs.sm2 import ReviewEvent, SchedulingState


TODAY = date(2025, 1, 6)


def stored_entry(**overrides) -> dict:
    doc = {
        "id": "entry-1",
        "term": "falar",
        "translation": "sprechen",
        "example": "Eu falo português.",
        "category": "VERBS",
        "level": 1,
        "tags": [],
        "createdAt": "2025-01-01T00:00:00Z",
        "updatedAt": "2025-01-01T00:00:00Z",
        "nextReview": "2025-01-06",
        "_etag": '"00000000-0000"',
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def container():
    container = MagicMock()
    # Cosmos echoes the written document back
    container.create_item.side_effect = lambda body: body
    container.replace_item.side_effect = lambda item, body, **conditions: body
    return container


class TestEntryRepository:
    """Tests for EntryRepository."""

    def test_get_by_id_reads_by_id_partition(self, container):
        container.read_item.return_value = stored_entry()
        repo = EntryRepository(container)

        entry = repo.get_by_id("entry-1")

        container.read_item.assert_called_once_with(item="entry-1", partition_key="entry-1")
        assert entry.term == "falar"
        assert entry.nextReview == TODAY

    def test_get_by_id_not_found(self, container):
        container.read_item.side_effect = CosmosResourceNotFoundError(message="missing")
        repo = EntryRepository(container)

        with pytest.raises(EntryNotFoundError):
            repo.get_by_id("missing")

    def test_legacy_entry_loads_with_unset_scheduling_fields(self, container):
        container.read_item.return_value = stored_entry()
        repo = EntryRepository(container)

        state = repo.load_state("entry-1")

        assert state == SchedulingState(next_review_date=TODAY)

    def test_create_is_due_today(self, container):
        repo = EntryRepository(container)

        entry = repo.create(
            EntryCreate(term="casa", translation="Haus", category="NOUNS"),
            today=TODAY,
        )

        body = container.create_item.call_args.kwargs["body"]
        assert body["nextReview"] == "2025-01-06"
        assert body["repetitions"] is None
        assert entry.nextReview == TODAY
        assert entry.id == body["id"]

    def test_store_state_writes_conditionally_without_rereading(self, container):
        container.read_item.return_value = stored_entry()
        repo = EntryRepository(container)
        state = SchedulingState(
            repetitions=1,
            ease_factor=2.6,
            last_review_date=TODAY,
            next_review_date=date(2025, 1, 7),
        )

        loaded = repo.get_by_id("entry-1")
        entry = repo.store_state(loaded, state)

        assert container.read_item.call_count == 1
        call = container.replace_item.call_args.kwargs
        assert call["etag"] == '"00000000-0000"'
        assert call["match_condition"] == MatchConditions.IfNotModified
        body = call["body"]
        assert body["repetitions"] == 1
        assert body["easeFactor"] == 2.6
        assert body["lastReviewDate"] == "2025-01-06"
        assert body["nextReview"] == "2025-01-07"
        assert "etag" not in body and "_etag" not in body
        assert entry.scheduling_state() == state
        # The loaded entry is left untouched
        assert loaded.repetitions is None

    def test_store_state_conflict(self, container):
        container.read_item.return_value = stored_entry()
        container.replace_item.side_effect = CosmosAccessConditionFailedError(message="precondition failed")
        repo = EntryRepository(container)

        with pytest.raises(ConcurrentUpdateError):
            repo.store_state(repo.get_by_id("entry-1"), SchedulingState(repetitions=1, ease_factor=2.5))

    def test_replace_without_etag_is_unconditional(self, container):
        repo = EntryRepository(container)

        repo.replace(VocabularyEntry(id="entry-1", term="casa", translation="Haus", category="NOUNS"))

        assert "etag" not in container.replace_item.call_args.kwargs

    def test_list_due_queries_by_date(self, container):
        container.query_items.side_effect = [
            [stored_entry(id="legacy")],
            [stored_entry(id="due")],
        ]
        repo = EntryRepository(container)

        entries = repo.list_due(TODAY)

        assert [e.id for e in entries] == ["legacy", "due"]
        due_call = container.query_items.call_args_list[1].kwargs
        assert "c.nextReview <= @today" in due_call["query"]
        assert {"name": "@today", "value": "2025-01-06"} in due_call["parameters"]
        assert due_call["enable_cross_partition_query"] is True

    def test_list_due_filters_category(self, container):
        container.query_items.side_effect = [[], []]
        repo = EntryRepository(container)

        repo.list_due(TODAY, category="NOUNS")

        for call in container.query_items.call_args_list:
            assert "c.category = @category" in call.kwargs["query"]
            assert {"name": "@category", "value": "NOUNS"} in call.kwargs["parameters"]


class TestReviewHistoryRepository:
    """Tests for ReviewHistoryRepository."""

    def test_record_appends_snapshot(self, container):
        repo = ReviewHistoryRepository(container)
        event = ReviewEvent(
            item_id="entry-1",
            review_date=TODAY,
            quality_rating=4,
            state=SchedulingState(
                repetitions=2,
                ease_factor=2.5,
                last_review_date=TODAY,
                next_review_date=date(2025, 1, 12),
            ),
        )

        history = repo.record(event, notes="Good recall")

        body = container.create_item.call_args.kwargs["body"]
        assert body["entryId"] == "entry-1"
        assert body["reviewDate"] == "2025-01-06"
        assert body["qualityRating"] == 4
        assert body["repetitions"] == 2
        assert body["nextReviewDate"] == "2025-01-12"
        assert body["notes"] == "Good recall"
        assert history.id == body["id"]
        container.replace_item.assert_not_called()

    def test_list_by_entry_uses_entry_partition(self, container):
        container.query_items.return_value = []
        repo = ReviewHistoryRepository(container)

        assert repo.list_by_entry("entry-1") == []

        call = container.query_items.call_args.kwargs
        assert call["partition_key"] == "entry-1"
        assert "ORDER BY c.createdAt DESC" in call["query"]

    def test_list_by_date_range(self, container):
        container.query_items.return_value = [
            {
                "id": "h-1",
                "entryId": "entry-1",
                "reviewDate": "2025-01-03",
                "qualityRating": 5,
                "repetitions": 1,
                "easeFactor": 2.6,
                "nextReviewDate": "2025-01-04",
                "createdAt": "2025-01-03T10:00:00Z",
            }
        ]
        repo = ReviewHistoryRepository(container)

        history = repo.list_by_date_range(date(2025, 1, 1), date(2025, 1, 31))

        assert history[0].reviewDate == date(2025, 1, 3)
        params = container.query_items.call_args.kwargs["parameters"]
        assert {"name": "@start", "value": "2025-01-01"} in params
        assert {"name": "@end", "value": "2025-01-31"} in params


def stored_session(**overrides) -> dict:
    doc = {
        "id": "session-1",
        "status": "IN_PROGRESS",
        "startTime": "2025-01-06T08:30:00Z",
        "endTime": None,
        "totalEntries": 1,
        "completedEntries": 0,
        "entries": [{"entryId": "entry-1", "term": "falar", "reviewed": False}],
        "createdAt": "2025-01-06T08:30:00Z",
        "updatedAt": "2025-01-06T08:30:00Z",
        "_etag": '"session-etag"',
    }
    doc.update(overrides)
    return doc


class TestReviewSessionRepository:
    """Tests for ReviewSessionRepository."""

    def test_create_and_read(self, container):
        repo = ReviewSessionRepository(container)
        session = ReviewSession(
            totalEntries=1,
            entries=[ReviewSessionEntry(entryId="entry-1", term="falar")],
        )

        created = repo.create(session)

        body = container.create_item.call_args.kwargs["body"]
        assert body["status"] == "IN_PROGRESS"
        assert body["entries"][0]["entryId"] == "entry-1"
        assert created.id == session.id

        container.read_item.return_value = stored_session(id=session.id)
        assert repo.get_by_id(session.id).etag == '"session-etag"'
        container.read_item.assert_called_with(item=session.id, partition_key=session.id)

    def test_get_by_id_not_found(self, container):
        container.read_item.side_effect = CosmosResourceNotFoundError(message="missing")

        with pytest.raises(SessionNotFoundError):
            ReviewSessionRepository(container).get_by_id("missing")

    def test_replace_uses_etag(self, container):
        container.read_item.return_value = stored_session()
        repo = ReviewSessionRepository(container)
        session = repo.get_by_id("session-1")
        session.mark_reviewed("entry-1", 4, "2025-01-06T08:31:00Z")

        updated = repo.replace(session)

        call = container.replace_item.call_args.kwargs
        assert call["etag"] == '"session-etag"'
        assert call["match_condition"] == MatchConditions.IfNotModified
        assert updated.completedEntries == 1

    def test_replace_conflict(self, container):
        container.read_item.return_value = stored_session()
        container.replace_item.side_effect = CosmosAccessConditionFailedError(message="precondition failed")
        repo = ReviewSessionRepository(container)

        with pytest.raises(ConcurrentUpdateError):
            repo.replace(repo.get_by_id("session-1"))

    def test_list_by_status(self, container):
        container.query_items.return_value = [stored_session(status="COMPLETED")]
        repo = ReviewSessionRepository(container)

        sessions = repo.list_by_status("COMPLETED")

        assert [s.status for s in sessions] == ["COMPLETED"]
        call = container.query_items.call_args.kwargs
        assert call["parameters"] == [{"name": "@status", "value": "COMPLETED"}]
        assert call["enable_cross_partition_query"] is True

    def test_list_by_start_time(self, container):
        container.query_items.return_value = []
        repo = ReviewSessionRepository(container)

        repo.list_by_start_time("2025-01-01T00:00:00Z", "2025-01-31T23:59:59Z")

        call = container.query_items.call_args.kwargs
        assert "c.startTime >= @start AND c.startTime <= @end" in call["query"]
        assert {"name": "@end", "value": "2025-01-31T23:59:59Z"} in call["parameters"]
