"""Address data store: current/previous snapshots plus the keyed cache."""

import time
from typing import Callable, Hashable, Optional

from .address import AddressSnapshot
from .config import CACHE_MAX_SIZE, CACHE_EXPIRATION_SECONDS
from .lru_cache import LRUCache


class AddressDataStore:
    """
    Holds the address state of the address cache.

    Two independent parts:
        - current/previous snapshots, used for change detection
        - a bounded LRU keyed by coordinate fingerprint, used to avoid
          repeated lookups

    Reading from the keyed cache refreshes recency but is not an update.
    """

    def __init__(
        self,
        max_size: int = CACHE_MAX_SIZE,
        expiration_seconds: Optional[float] = CACHE_EXPIRATION_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.cache = LRUCache(max_size, expiration_seconds, clock=clock)
        self.current: Optional[AddressSnapshot] = None
        self.previous: Optional[AddressSnapshot] = None

    def put(self, key: Hashable, snapshot: AddressSnapshot) -> Optional[Hashable]:
        """Store a snapshot under key. Returns the evicted key, if any."""
        return self.cache.put(key, snapshot)

    def get(self, key: Hashable) -> Optional[AddressSnapshot]:
        return self.cache.get(key)

    def update(self, snapshot: AddressSnapshot):
        """Make snapshot current; the old current becomes previous."""
        self.previous = self.current
        self.current = snapshot

    def get_current(self) -> Optional[AddressSnapshot]:
        return self.current

    def get_previous(self) -> Optional[AddressSnapshot]:
        return self.previous

    def has_history(self) -> bool:
        return self.current is not None and self.previous is not None

    def clean_expired(self) -> int:
        return self.cache.clean_expired()

    @property
    def size(self) -> int:
        return len(self.cache)

    @property
    def max_size(self) -> int:
        return self.cache.max_size

    def clear(self):
        self.cache.clear()
        self.current = None
        self.previous = None
