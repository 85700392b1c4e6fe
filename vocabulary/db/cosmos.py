"""
Cosmos DB access for vocabulary entries, review history and review sessions.

Connection mode depends on the environment:
- COSMOS_EMULATOR=true: local emulator on its well-known endpoint and key
- COSMOS_ENDPOINT=<url>: Azure account, authenticated with DefaultAzureCredential
  (managed identity when deployed, `az login` session when run locally)

Containers and their partition keys:
- entries (/id): vocabulary entries and their scheduling state
- review_history (/entryId): one immutable document per review
- review_sessions (/id): review sessions and the entries they cover

With COSMOS_CREATE_CONTAINERS=true the database and all containers are
created at startup when missing; useful against a fresh emulator.
"""

import os
import logging
from functools import lru_cache
from azure.cosmos import CosmosClient, DatabaseProxy, ContainerProxy, PartitionKey
from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential

logger = logging.getLogger(__name__)

# Cosmos DB Emulator well-known key (public, not a secret)
# https://learn.microsoft.com/en-us/azure/cosmos-db/emulator#authentication
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
EMULATOR_ENDPOINT = "https://localhost:8081"

ENTRIES_PARTITION_KEY = "/id"
HISTORY_PARTITION_KEY = "/entryId"
SESSIONS_PARTITION_KEY = "/id"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


class CosmosDBSettings:
    """Cosmos DB connection settings read from the environment."""

    def __init__(self):
        self.use_emulator = _env_flag("COSMOS_EMULATOR")
        self.endpoint = EMULATOR_ENDPOINT if self.use_emulator else os.getenv("COSMOS_ENDPOINT", "")
        self.database_name = os.getenv("COSMOS_DB_NAME", "vocabulary")
        self.entries_container = os.getenv("COSMOS_ENTRIES_CONTAINER", "entries")
        self.history_container = os.getenv("COSMOS_HISTORY_CONTAINER", "review_history")
        self.sessions_container = os.getenv("COSMOS_SESSIONS_CONTAINER", "review_sessions")
        self.create_containers = _env_flag("COSMOS_CREATE_CONTAINERS")

    def is_configured(self) -> bool:
        return bool(self.endpoint)

    def partition_keys(self) -> dict[str, str]:
        """Container name -> partition key path."""
        return {
            self.entries_container: ENTRIES_PARTITION_KEY,
            self.history_container: HISTORY_PARTITION_KEY,
            self.sessions_container: SESSIONS_PARTITION_KEY,
        }


@lru_cache()
def get_settings() -> CosmosDBSettings:
    """Get cached Cosmos DB settings."""
    return CosmosDBSettings()


_client: CosmosClient | None = None
_database: DatabaseProxy | None = None


def _build_client(settings: CosmosDBSettings) -> CosmosClient:
    if settings.use_emulator:
        logger.info("Connecting to the Cosmos DB Emulator at %s", settings.endpoint)
        # The emulator serves a self-signed certificate
        return CosmosClient(settings.endpoint, credential=EMULATOR_KEY, connection_verify=False)

    logger.info("Connecting to Cosmos DB at %s with DefaultAzureCredential", settings.endpoint)
    return CosmosClient(settings.endpoint, credential=DefaultAzureCredential())


def get_client() -> CosmosClient:
    """Return the process-wide Cosmos client, creating it on first use.

    Raises:
        RuntimeError: If neither COSMOS_ENDPOINT nor COSMOS_EMULATOR is set
    """
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.is_configured():
            raise RuntimeError(
                "Cosmos DB is not configured. "
                "Set COSMOS_ENDPOINT, or COSMOS_EMULATOR=true to use the local emulator."
            )
        _client = _build_client(settings)
    return _client


def get_database() -> DatabaseProxy:
    """Get the database proxy."""
    global _database
    if _database is None:
        _database = get_client().get_database_client(get_settings().database_name)
    return _database


def get_container(container_name: str) -> ContainerProxy:
    return get_database().get_container_client(container_name)


def get_entries_container() -> ContainerProxy:
    """Container holding vocabulary entries."""
    return get_container(get_settings().entries_container)


def get_history_container() -> ContainerProxy:
    """Container holding review history records."""
    return get_container(get_settings().history_container)


def get_sessions_container() -> ContainerProxy:
    """Container holding review sessions."""
    return get_container(get_settings().sessions_container)


def ensure_containers() -> None:
    """Create the database and containers if they do not exist yet."""
    global _database
    settings = get_settings()
    _database = get_client().create_database_if_not_exists(id=settings.database_name)
    for name, path in settings.partition_keys().items():
        _database.create_container_if_not_exists(id=name, partition_key=PartitionKey(path=path))
        logger.info("Container %s ready (partition key %s)", name, path)


def verify_connection() -> bool:
    """Return True if the database can be read."""
    if not get_settings().is_configured():
        return False
    try:
        get_database().read()
    except AzureError as e:
        logger.warning("Cosmos DB connection check failed: %s", e)
        return False
    return True


def close_client() -> None:
    """Forget the cached client and database proxies."""
    global _client, _database
    # CosmosClient pools connections itself and has nothing to close here
    _client = None
    _database = None
