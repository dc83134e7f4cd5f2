"""Bounded least-recently-used cache with optional expiration."""

import time
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    stored_at: float
    last_accessed: float


class LRUCache:
    """
    In-memory LRU cache.

    Entries are kept in recency order: the first entry is the least
    recently used. ``put`` and ``get`` both move an entry to the end.
    Entries older than ``expiration_seconds`` (since they were stored)
    are treated as missing.

    Note:
        Cache is lost on restart.
    """

    def __init__(
        self,
        max_size: int = 50,
        expiration_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got: {max_size}")
        self.max_size = max_size
        self.expiration_seconds = expiration_seconds
        self.clock = clock
        self.entries: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return self.expiration_seconds is not None and now - entry.stored_at > self.expiration_seconds

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the value for key (or None) and mark it most recently used."""
        entry = self.entries.get(key)
        if entry is None:
            return None
        now = self.clock()
        if self._is_expired(entry, now):
            del self.entries[key]
            return None
        entry.last_accessed = now
        self.entries.move_to_end(key)
        return entry.value

    def put(self, key: Hashable, value: Any) -> Optional[Hashable]:
        """
        Insert or replace a value and mark it most recently used.

        Returns:
            The evicted key when the cache overflowed, else None
        """
        now = self.clock()
        self.entries[key] = CacheEntry(value, stored_at=now, last_accessed=now)
        self.entries.move_to_end(key)
        if len(self.entries) > self.max_size:
            evicted, _ = self.entries.popitem(last=False)
            logger.debug(f"Evicted least recently used cache entry {evicted!r}")
            return evicted
        return None

    def clean_expired(self) -> int:
        """Remove expired entries. Returns the number removed."""
        now = self.clock()
        expired = [key for key, entry in self.entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self.entries[key]
        return len(expired)

    def clear(self):
        self.entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self) -> list:
        """Keys from least to most recently used."""
        return list(self.entries.keys())

    def __str__(self):
        return f"LRUCache: size={len(self)}/{self.max_size}, expiration={self.expiration_seconds}s"
