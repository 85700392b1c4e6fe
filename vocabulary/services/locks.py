"""Per-entry locks serializing scheduling updates."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from cachetools import TTLCache


class EntryLockRegistry:
    """Thread-safe registry of one lock per key (entry or session ID).

    Idle locks live in a TTL cache so keys that are no longer reviewed do not
    accumulate. While a lock is in use by ``hold`` it is moved into a
    reference-counted table that neither the TTL nor ``maxsize`` can evict,
    and goes back into the cache when its last holder leaves.
    """

    # Default TTL: 10 minutes
    DEFAULT_TTL_SECONDS = 10 * 60
    # Max idle locks to cache
    MAX_LOCKS = 10000

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, maxsize: int = MAX_LOCKS):
        self._idle: TTLCache[str, threading.Lock] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        # key -> (lock, number of threads holding or waiting for it)
        self._in_use: dict[str, tuple[threading.Lock, int]] = {}
        self._guard = threading.Lock()

    def get(self, key: str) -> threading.Lock:
        """Return the lock for a key, creating it if needed.

        Accessing an idle lock refreshes its TTL.
        """
        with self._guard:
            if key in self._in_use:
                return self._in_use[key][0]
            lock = self._idle.get(key)
            if lock is None:
                lock = threading.Lock()
            self._idle[key] = lock
            return lock

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            if key in self._in_use:
                lock, users = self._in_use[key]
            else:
                lock, users = self._idle.pop(key, None) or threading.Lock(), 0
            self._in_use[key] = (lock, users + 1)
            return lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            lock, users = self._in_use[key]
            if users > 1:
                self._in_use[key] = (lock, users - 1)
            else:
                del self._in_use[key]
                self._idle[key] = lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the key's lock for the duration of the block."""
        lock = self._checkout(key)
        try:
            with lock:
                yield
        finally:
            self._checkin(key)

    def __len__(self) -> int:
        with self._guard:
            return len(self._idle) + len(self._in_use)
