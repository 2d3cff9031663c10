"""
Small in-process TTL cache.

Per-process only: the durable store stays the source of truth, entries here
just save a read when the same key is needed again soon.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    """A cached value and its age in seconds at lookup time."""
    value: Any
    age: float


class TTLCache:
    """Key/value cache whose entries are considered stale after a caller-given TTL."""

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._store: Dict[str, tuple[float, Any]] = {}

    def get(self, key: str, ttl_seconds: Optional[float] = None) -> Optional[CacheEntry]:
        """
        Look up a key.

        Returns None when the key is missing or older than ``ttl_seconds``.
        Without a TTL any stored entry is returned.
        """
        item = self._store.get(key)
        if item is None:
            return None
        stored_at, value = item
        age = self._clock() - stored_at
        if ttl_seconds is not None and age >= ttl_seconds:
            del self._store[key]
            return None
        return CacheEntry(value=value, age=age)

    def set(self, key: str, value: Any) -> None:
        self._store[key] = (self._clock(), value)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def get_or_set(self, key: str, ttl_seconds: float, loader: Callable[[], Any]) -> Any:
        """Return a fresh cached value, otherwise load, store and return a new one."""
        entry = self.get(key, ttl_seconds)
        if entry is not None and entry.value is not None:
            return entry.value
        value = loader()
        if value is not None:
            self.set(key, value)
        return value

    def clear(self) -> None:
        self._store.clear()
