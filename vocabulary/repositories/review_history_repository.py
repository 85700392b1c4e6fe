"""Repository for the append-only review history."""

from datetime import date

from azure.cosmos import ContainerProxy

from vocabulary.db import get_history_container
from vocabulary.models import ReviewHistory
from vocabulary.srs.sm2 import ReviewEvent
from vocabulary.srs.time import date_to_iso


class ReviewHistoryRepository:
    """Review recorder backed by the review_history container.

    Records are only ever created; there is no update path.
    """

    def __init__(self, container: ContainerProxy | None = None):
        """Initialize the repository with an optional container."""
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        """Get the container, lazily initializing if needed."""
        if self._container is None:
            self._container = get_history_container()
        return self._container

    def record(self, event: ReviewEvent, notes: str | None = None) -> ReviewHistory:
        """Append a history record for an applied review."""
        history = ReviewHistory.from_event(event, notes=notes)
        created_item = self.container.create_item(body=history.model_dump(mode="json"))
        return ReviewHistory(**created_item)

    def list_by_entry(self, entry_id: str) -> list[ReviewHistory]:
        """List history records for an entry, newest first."""
        query = "SELECT * FROM c WHERE c.entryId = @entryId ORDER BY c.createdAt DESC"
        parameters = [{"name": "@entryId", "value": entry_id}]

        items = list(
            self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=entry_id,
            )
        )
        return [ReviewHistory(**item) for item in items]

    def list_by_date_range(self, start: date, end: date) -> list[ReviewHistory]:
        """List history records with start <= reviewDate <= end."""
        query = (
            "SELECT * FROM c WHERE c.reviewDate >= @start AND c.reviewDate <= @end "
            "ORDER BY c.reviewDate ASC"
        )
        parameters = [
            {"name": "@start", "value": date_to_iso(start)},
            {"name": "@end", "value": date_to_iso(end)},
        ]

        items = list(
            self.container.query_items(
                query=query,
                parameters=parameters,
                enable_cross_partition_query=True,
            )
        )
        return [ReviewHistory(**item) for item in items]


# Singleton instance
_review_history_repository: ReviewHistoryRepository | None = None


def get_review_history_repository() -> ReviewHistoryRepository:
    """Get the review history repository singleton."""
    global _review_history_repository
    if _review_history_repository is None:
        _review_history_repository = ReviewHistoryRepository()
    return _review_history_repository
