"""Database module for Cosmos DB integration."""

from .cosmos import (
    get_client,
    get_database,
    get_container,
    get_entries_container,
    get_history_container,
    get_sessions_container,
    get_settings,
    ensure_containers,
    verify_connection,
    close_client,
)

__all__ = [
    "get_client",
    "get_database",
    "get_container",
    "get_entries_container",
    "get_history_container",
    "get_sessions_container",
    "get_settings",
    "ensure_containers",
    "verify_connection",
    "close_client",
]
