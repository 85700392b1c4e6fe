"""Repository for review sessions."""

from azure.core import MatchConditions
from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosResourceNotFoundError

from vocabulary.db import get_sessions_container
from vocabulary.models import ReviewSession
from vocabulary.repositories.entry_repository import ConcurrentUpdateError


class SessionNotFoundError(Exception):
    """Raised when a review session is not found."""

    pass


class ReviewSessionRepository:
    """Review sessions, partitioned by their own id."""

    def __init__(self, container: ContainerProxy | None = None):
        self._container = container

    @property
    def container(self) -> ContainerProxy:
        if self._container is None:
            self._container = get_sessions_container()
        return self._container

    def get_by_id(self, session_id: str) -> ReviewSession:
        try:
            item = self.container.read_item(item=session_id, partition_key=session_id)
        except CosmosResourceNotFoundError:
            raise SessionNotFoundError(f"Review session with ID {session_id} not found")
        return ReviewSession(**item)

    def create(self, session: ReviewSession) -> ReviewSession:
        created_item = self.container.create_item(body=session.model_dump(mode="json"))
        return ReviewSession(**created_item)

    def replace(self, session: ReviewSession) -> ReviewSession:
        """Persist a session, conditional on the ETag it was read with.

        Raises:
            ConcurrentUpdateError: If the document changed since it was read
        """
        conditions = {}
        if session.etag:
            conditions = {"etag": session.etag, "match_condition": MatchConditions.IfNotModified}
        try:
            updated_item = self.container.replace_item(
                item=session.id,
                body=session.model_dump(mode="json"),
                **conditions,
            )
        except CosmosAccessConditionFailedError:
            raise ConcurrentUpdateError(f"Review session {session.id} was modified concurrently")
        return ReviewSession(**updated_item)

    def list_by_status(self, status: str) -> list[ReviewSession]:
        """List sessions in a status, most recently started first."""
        query = "SELECT * FROM c WHERE c.status = @status ORDER BY c.startTime DESC"
        items = self.container.query_items(
            query=query,
            parameters=[{"name": "@status", "value": status}],
            enable_cross_partition_query=True,
        )
        return [ReviewSession(**item) for item in items]

    def list_by_start_time(self, start: str, end: str) -> list[ReviewSession]:
        """List sessions with start <= startTime <= end (UTC ISO 'Z' strings)."""
        query = (
            "SELECT * FROM c WHERE c.startTime >= @start AND c.startTime <= @end "
            "ORDER BY c.startTime ASC"
        )
        items = self.container.query_items(
            query=query,
            parameters=[
                {"name": "@start", "value": start},
                {"name": "@end", "value": end},
            ],
            enable_cross_partition_query=True,
        )
        return [ReviewSession(**item) for item in items]


# Singleton instance
_review_session_repository: ReviewSessionRepository | None = None


def get_review_session_repository() -> ReviewSessionRepository:
    """Get the review session repository singleton."""
    global _review_session_repository
    if _review_session_repository is None:
        _review_session_repository = ReviewSessionRepository()
    return _review_session_repository
