"""Turn address changes into prioritized spoken notifications."""

import logging
from typing import Any, Optional

from .address import StandardAddress
from .address_cache import AddressCache
from .config import ANNOUNCE_FULL_ADDRESS
from .events import AddressResolved, FullUpdate
from .notification_queue import PriorityNotificationQueue

logger = logging.getLogger(__name__)

# Priority order: municipality > neighborhood > street > periodic full address
PRIORITY_MUNICIPALITY = 3
PRIORITY_NEIGHBORHOOD = 2
PRIORITY_STREET = 1
PRIORITY_FULL_ADDRESS = 0


def municipality_text(new_value: Optional[str], old_value: Optional[str] = None) -> str:
    if not new_value:
        return "Novo município detectado"
    if old_value:
        return f"Você saiu de {old_value} e entrou em {new_value}"
    return f"Você entrou no município de {new_value}"


def neighborhood_text(new_value: Optional[str]) -> str:
    if not new_value:
        return "Novo bairro detectado"
    return f"Você entrou no bairro {new_value}"


def street_text(address: Optional[StandardAddress], new_value: Optional[str] = None) -> str:
    if address is not None and address.street:
        return f"Você está agora em {address.full_street()}"
    if new_value:
        return f"Você está agora em {new_value}"
    return "Nova localização detectada"


def full_address_text(address: Optional[StandardAddress]) -> str:
    """
    Describe the whole address, from the most specific level available.

    1. Street level: "Você está em [street], [neighborhood], [municipality]"
    2. Neighborhood level: "Você está em bairro [neighborhood], [municipality]"
    3. Municipality level: "Você está em [municipality]"
    """
    if address is None:
        return "Localização não disponível"
    if address.street:
        text = f"Você está em {address.full_street()}"
        if address.neighborhood:
            text += f", {address.neighborhood}"
        if address.municipality:
            text += f", {address.municipality}"
        return text
    if address.neighborhood:
        text = f"Você está em bairro {address.neighborhood}"
        if address.municipality:
            text += f", {address.municipality}"
        return text
    if address.municipality:
        return f"Você está em {address.municipality}"
    return "Localização detectada, mas endereço não disponível"


class ChangeAnnouncer:
    """
    Feeds the notification queue.

    Registers municipality/neighborhood/street callbacks on the address
    cache and, when subscribed to a reverse geocoder, announces the full
    address after every resolution triggered by a FullUpdate.
    """

    def __init__(
        self,
        address_cache: AddressCache,
        queue: PriorityNotificationQueue,
        announce_full_address: bool = ANNOUNCE_FULL_ADDRESS,
    ):
        self.address_cache = address_cache
        self.queue = queue
        self.announce_full_address = announce_full_address
        self._callbacks = {
            "municipality": self.on_municipality_change,
            "neighborhood": self.on_neighborhood_change,
            "street": self.on_street_change,
        }
        for field_name, callback in self._callbacks.items():
            address_cache.register_callback(field_name, callback)

    def _current_address(self) -> Optional[StandardAddress]:
        current = self.address_cache.current
        return current.standardized if current else None

    def on_municipality_change(self, new_value: Any, old_value: Any):
        self.queue.enqueue(municipality_text(new_value, old_value), PRIORITY_MUNICIPALITY)

    def on_neighborhood_change(self, new_value: Any, old_value: Any):
        self.queue.enqueue(neighborhood_text(new_value), PRIORITY_NEIGHBORHOOD)

    def on_street_change(self, new_value: Any, old_value: Any):
        self.queue.enqueue(street_text(self._current_address(), new_value), PRIORITY_STREET)

    def update(self, event: Any):
        """Announce the full address for resolutions of full position updates."""
        if not self.announce_full_address:
            return
        if isinstance(event, AddressResolved) and isinstance(event.trigger, FullUpdate):
            self.queue.enqueue(full_address_text(event.standardized), PRIORITY_FULL_ADDRESS)

    def detach(self):
        """Stop announcing address changes."""
        for field_name, callback in self._callbacks.items():
            self.address_cache.unregister_callback(field_name, callback)
