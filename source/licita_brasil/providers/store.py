"""This module provides the in-memory key-value stores used by the application.

Users, company lookups and municipality lists are kept in process memory.
Each store is created once when the application starts and handed to the
repositories that need it; nothing reaches a store through module globals.
"""

import threading
import time
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

V = TypeVar("V")


class MemoryStore(Generic[V]):
    """A thread-safe, unbounded dictionary store."""

    def __init__(self) -> None:
        """Initializes an empty store."""
        self._items: dict[str, V] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> V | None:
        """Returns the value stored under `key`, or None."""
        with self._lock:
            return self._items.get(key)

    def put(self, key: str, value: V) -> None:
        """Stores `value` under `key`, replacing any previous value."""
        with self._lock:
            self._items[key] = value

    def add(self, key: str, value: V) -> bool:
        """Stores `value` only if `key` is not present yet.

        Args:
            key: The key to store under.
            value: The value to store.

        Returns:
            True if the value was stored, False if the key already existed.
        """
        with self._lock:
            if key in self._items:
                return False
            self._items[key] = value
            return True

    def delete(self, key: str) -> None:
        """Removes `key` if present."""
        with self._lock:
            self._items.pop(key, None)

    def items(self) -> Iterator[tuple[str, V]]:
        """Iterates over a snapshot of the stored entries."""
        with self._lock:
            snapshot = list(self._items.items())
        return iter(snapshot)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class TimedStore(MemoryStore[tuple[float, V]]):
    """A store whose entries expire a fixed number of seconds after being written.

    Expired entries are treated as missing by `get_fresh` and are dropped by
    `purge_expired`.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        """Initializes an empty store.

        Args:
            ttl_seconds: How long an entry stays fresh after it is written.
            clock: The time source, in seconds.
        """
        super().__init__()
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def put_fresh(self, key: str, value: V) -> None:
        """Stores `value` under `key`, stamped with the current time."""
        self.put(key, (self._clock(), value))

    def get_fresh(self, key: str) -> V | None:
        """Returns the value under `key` if it is still fresh, otherwise None."""
        entry = self.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            return None
        return value

    def purge_expired(self) -> int:
        """Removes every expired entry.

        Returns:
            The number of entries removed.
        """
        now = self._clock()
        with self._lock:
            expired = [key for key, (stored_at, _) in self._items.items() if now - stored_at >= self.ttl_seconds]
            for key in expired:
                del self._items[key]
        return len(expired)
