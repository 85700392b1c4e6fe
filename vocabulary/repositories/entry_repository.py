"""Repository for vocabulary entries and their scheduling state."""

from datetime import date

from azure.core import MatchConditions
from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosResourceNotFoundError

from vocabulary.db import get_entries_container
from vocabulary.models import EntryCreate, VocabularyEntry
from vocabulary.srs.sm2 import SchedulingState
from vocabulary.srs.time import date_to_iso, utc_today


class EntryNotFoundError(Exception):
    """Raised when a vocabulary entry is not found."""

    pass


class ConcurrentUpdateError(Exception):
    """Raised when an entry changed between read and write."""

    pass


class EntryRepository:
    """Vocabulary store backed by the entries container.

    Entries are partitioned by their own id, so point reads use the id as the
    partition key and due-date queries run cross-partition.
    """

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_entries_container()
        return self._container

    def get_by_id(self, entry_id: str) -> VocabularyEntry:
        """Get an entry by ID."""
        try:
            item = self.container.read_item(item=entry_id, partition_key=entry_id)
        except CosmosResourceNotFoundError:
            raise EntryNotFoundError(f"Vocabulary entry with ID {entry_id} not found")
        return VocabularyEntry(**item)

    def create(self, entry_create: EntryCreate, today: date | None = None) -> VocabularyEntry:
        """Create a new entry, due on ``today``."""
        entry = VocabularyEntry(
            **entry_create.model_dump(),
            nextReview=today or utc_today(),
        )
        created_item = self.container.create_item(body=entry.model_dump(mode="json"))
        return VocabularyEntry(**created_item)

    def replace(self, entry: VocabularyEntry) -> VocabularyEntry:
        """Replace (persist) a full entry document.

        If the entry carries the ETag it was read with, the write only succeeds
        when the stored document is still that version.

        Raises:
            ConcurrentUpdateError: If the document changed since it was read
        """
        conditions = {}
        if entry.etag:
            conditions = {"etag": entry.etag, "match_condition": MatchConditions.IfNotModified}
        try:
            updated_item = self.container.replace_item(
                item=entry.id,
                body=entry.model_dump(mode="json"),
                **conditions,
            )
        except CosmosAccessConditionFailedError:
            raise ConcurrentUpdateError(f"Vocabulary entry {entry.id} was modified concurrently")
        return VocabularyEntry(**updated_item)

    def load_state(self, entry_id: str) -> SchedulingState:
        """Load the scheduling state of an entry (unset fields stay None)."""
        return self.get_by_id(entry_id).scheduling_state()

    def store_state(self, entry: VocabularyEntry, state: SchedulingState) -> VocabularyEntry:
        """Persist a scheduler result onto an entry read by ``get_by_id``.

        The write is conditional on the entry's ETag, so an update made by
        another process after the read is not overwritten.
        """
        entry = entry.model_copy()
        entry.apply_scheduling_state(state)
        return self.replace(entry)

    def list_due(self, today: date, category: str | None = None) -> list[VocabularyEntry]:
        """List entries due on or before ``today``, earliest first.

        Legacy documents without nextReview are treated as due and come first.
        """
        category_clause = " AND c.category = @category" if category else ""
        base_params = [{"name": "@category", "value": category}] if category else []

        legacy_query = f"SELECT * FROM c WHERE NOT IS_DEFINED(c.nextReview){category_clause}"
        legacy_items = list(
            self.container.query_items(
                query=legacy_query,
                parameters=base_params,
                enable_cross_partition_query=True,
            )
        )

        due_query = (
            f"SELECT * FROM c WHERE c.nextReview <= @today{category_clause} "
            "ORDER BY c.nextReview ASC"
        )
        due_items = list(
            self.container.query_items(
                query=due_query,
                parameters=[{"name": "@today", "value": date_to_iso(today)}, *base_params],
                enable_cross_partition_query=True,
            )
        )

        return [VocabularyEntry(**item) for item in legacy_items + due_items]


# Singleton instance
_entry_repository: EntryRepository | None = None


def get_entry_repository() -> EntryRepository:
    """Get the entry repository singleton."""
    global _entry_repository
    if _entry_repository is None:
        _entry_repository = EntryRepository()
    return _entry_repository
