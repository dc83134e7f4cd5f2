"""Reverse geocoder: turns accepted positions into resolved addresses."""

import asyncio
import logging
from typing import Any, Optional, Set, Union

from .address import StandardAddress, standardize
from .errors import NetworkError
from .events import (
    AddressFailed, AddressResolved, FullUpdate, LightUpdate, PositionEvent,
)
from .geocoding import NominatimClient
from .observer import Publisher

logger = logging.getLogger(__name__)


class ReverseGeocoder(Publisher):
    """
    Subscribes to the position gatekeeper and publishes address events.

    Every resolve() gets a request id from a monotonically increasing
    counter. A completion whose id is no longer the latest issued is
    discarded: it is logged and nothing is published, so a slow stale
    response can never overwrite a newer address. In-flight requests are
    not cancelled.

    Attributes:
        client: Object with an async ``fetch(lat, lon)`` returning the
            raw payload (NominatimClient by default)
        current_address: Raw payload of the last applied resolution
        standardized_address: StandardAddress of the last applied resolution
    """

    def __init__(self, client: Optional[Any] = None):
        super().__init__()
        self.client = client if client is not None else NominatimClient()
        self.current_address: Any = None
        self.standardized_address: Optional[StandardAddress] = None
        self.error: Optional[NetworkError] = None
        self.latitude: Optional[float] = None
        self.longitude: Optional[float] = None
        self._request_counter = 0
        self._tasks: Set[asyncio.Task] = set()

    @property
    def latest_request_id(self) -> int:
        return self._request_counter

    @property
    def pending(self) -> int:
        """Number of lookups scheduled by update() that did not finish yet."""
        return len(self._tasks)

    def update(self, event: Any):
        """Handle a position event from the gatekeeper."""
        if not isinstance(event, (FullUpdate, LightUpdate)):
            logger.debug(f"Ignoring position event {type(event).__name__}")
            return

        position = event.position
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, cannot resolve address")
            return

        task = loop.create_task(self.resolve(position.latitude, position.longitude, trigger=event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def resolve(
        self, lat: float, lon: float, trigger: Optional[PositionEvent] = None
    ) -> Optional[Union[AddressResolved, AddressFailed]]:
        """
        Look up one coordinate pair and publish the outcome.

        Issues exactly one request. Publishes AddressResolved on success or
        AddressFailed on failure; never raises for lookup failures.

        Returns:
            The published event, or None when the completion was superseded
            by a newer request and therefore discarded.
        """
        self._request_counter += 1
        request_id = self._request_counter
        self.latitude = lat
        self.longitude = lon
        logger.debug(f"Resolving ({lat}, {lon}) as request #{request_id}")

        try:
            raw = await self.client.fetch(lat, lon)
            standardized = standardize(raw)
            error = None
        except NetworkError as e:
            raw, standardized, error = None, None, e
        except Exception as e:
            logger.error(f"Unexpected error in reverse geocoding: {e}")
            raw, standardized, error = None, None, NetworkError(f"Falha ao buscar endereço: {e}")

        if request_id != self._request_counter:
            logger.debug(
                f"Discarding stale result of request #{request_id} "
                f"(latest is #{self._request_counter})"
            )
            return None

        if error is not None:
            logger.error(f"Reverse geocoding failed for ({lat}, {lon}): {error.message}")
            self.error = error
            event = AddressFailed(self, error, lat, lon, request_id, trigger)
        else:
            self.current_address = raw
            self.standardized_address = standardized
            self.error = None
            event = AddressResolved(self, raw, standardized, lat, lon, request_id, trigger)

        self.publish(event)
        return event

    async def drain(self):
        """Wait until every lookup scheduled by update() has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def __str__(self):
        if self.latitude is None or self.longitude is None:
            return "ReverseGeocoder: No coordinates set"
        return f"ReverseGeocoder: {self.latitude}, {self.longitude}"
