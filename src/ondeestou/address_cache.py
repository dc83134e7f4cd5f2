"""Address cache: stores resolved addresses and reports what changed."""

import time
import logging
from typing import Any, Callable, Iterable, List, Optional

from .address import AddressSnapshot, StandardAddress, standardize
from .callback_registry import CallbackRegistry
from .change_detector import TRACKED_FIELDS, ChangeRecord, diff
from .config import CACHE_MAX_SIZE, CACHE_EXPIRATION_SECONDS, CACHE_KEY_PRECISION
from .data_store import AddressDataStore
from .events import AddressFailed, AddressResolved, CacheUpdated
from .geo import coordinate_key
from .observer import Publisher

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class AddressCache(Publisher):
    """
    Facade over the data store, change detector and callback registry.

    Subscribes to a reverse geocoder; every resolved address goes through
    accept(): the snapshot becomes current, is cached under its coordinate
    fingerprint, the tracked fields are diffed against the previous
    snapshot, field callbacks fire for each change and a CacheUpdated
    event is published (also when nothing changed).

    Note:
        One instance per process, created by the composition root.
    """

    def __init__(
        self,
        max_size: int = CACHE_MAX_SIZE,
        expiration_seconds: Optional[float] = CACHE_EXPIRATION_SECONDS,
        tracked_fields: Iterable[str] = TRACKED_FIELDS,
        key_precision: int = CACHE_KEY_PRECISION,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__()
        self.store = AddressDataStore(max_size, expiration_seconds, clock=clock)
        self.callbacks = CallbackRegistry()
        self.tracked_fields = tuple(tracked_fields)
        self.key_precision = key_precision

    @property
    def current(self) -> Optional[AddressSnapshot]:
        return self.store.get_current()

    @property
    def previous(self) -> Optional[AddressSnapshot]:
        return self.store.get_previous()

    @property
    def cache_size(self) -> int:
        return self.store.size

    def register_callback(self, field_name: str, callback: Callable):
        """Call ``callback(new_value, old_value)`` whenever field_name changes."""
        self.callbacks.register(field_name, callback)

    def unregister_callback(self, field_name: str, callback: Callable) -> bool:
        return self.callbacks.unregister(field_name, callback)

    def cache_key(self, raw: Any, latitude: Optional[float] = None, longitude: Optional[float] = None) -> Optional[str]:
        """
        Fingerprint for the keyed cache.

        Uses the given coordinates, else the payload's "lat"/"lon", else
        the address components (street|number|neighbourhood|city|postcode|country).
        """
        if latitude is None or longitude is None:
            if isinstance(raw, dict):
                latitude = _to_float(raw.get("lat"))
                longitude = _to_float(raw.get("lon"))
        if latitude is not None and longitude is not None:
            return coordinate_key(latitude, longitude, self.key_precision)

        if not isinstance(raw, dict) or not isinstance(raw.get("address"), dict):
            return None
        address = raw["address"]
        components = [
            address.get("road") or address.get("street") or "",
            address.get("house_number") or "",
            address.get("neighbourhood") or address.get("suburb") or "",
            address.get("city") or address.get("town") or address.get("municipality") or "",
            address.get("postcode") or "",
            address.get("country_code") or "",
        ]
        key = "|".join(c for c in components if str(c).strip())
        return key or None

    def accept(
        self,
        raw: Any,
        standardized: Optional[StandardAddress] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> List[ChangeRecord]:
        """
        Store a resolved address and report the tracked fields that changed.

        Args:
            raw: Provider payload
            standardized: StandardAddress (built from raw when omitted)
            latitude, longitude: Coordinates that were resolved

        Returns:
            Change records, empty when nothing tracked changed or there is
            no previous address yet
        """
        if standardized is None:
            standardized = standardize(raw)
        snapshot = AddressSnapshot(raw, standardized)

        self.store.update(snapshot)
        previous = self.store.get_previous()

        key = self.cache_key(raw, latitude, longitude)
        if key is not None:
            self.store.put(key, snapshot)

        changes = diff(previous, snapshot, self.tracked_fields)
        for change in changes:
            logger.info(f"Detected {change.field_name} change: {change.old_value!r} -> {change.new_value!r}")
            self.callbacks.invoke(change.field_name, change.new_value, change.old_value)

        self.publish(CacheUpdated(self, snapshot, changes, self.cache_size))
        return changes

    def update(self, event: Any):
        """Handle an address event from a reverse geocoder."""
        if isinstance(event, AddressResolved):
            self.accept(event.raw, event.standardized, event.latitude, event.longitude)
        elif isinstance(event, AddressFailed):
            logger.warning(
                f"Address lookup failed for ({event.latitude}, {event.longitude}): "
                f"{event.error.kind}: {event.error.message}"
            )
        else:
            logger.debug(f"Ignoring event {type(event).__name__}")

    def lookup(self, latitude: float, longitude: float) -> Optional[AddressSnapshot]:
        """Cached snapshot for a coordinate pair; a hit only refreshes recency."""
        return self.store.get(coordinate_key(latitude, longitude, self.key_precision))

    def clean_expired(self) -> int:
        removed = self.store.clean_expired()
        if removed > 0:
            logger.debug(f"Cleaned {removed} expired cache entries")
        return removed

    def clear(self):
        """Drop cached entries and the current/previous snapshots."""
        self.store.clear()

    def __str__(self):
        current = self.current.standardized if self.current else None
        return f"AddressCache: size={self.cache_size}, current={current}"
