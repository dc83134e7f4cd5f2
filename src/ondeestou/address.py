"""Standardized address built from a Nominatim payload."""

import re
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

STATE_CODE_RE = re.compile(r"^BR-([A-Z]{2})$")


@dataclass(frozen=True)
class StandardAddress:
    """Locale-independent view of an address."""
    street: Optional[str] = None
    house_number: Optional[str] = None
    neighborhood: Optional[str] = None
    municipality: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    def full_street(self) -> str:
        if not self.street:
            return ""
        if self.house_number:
            return f"{self.street}, {self.house_number}"
        return self.street

    def full_municipality(self) -> str:
        if not self.municipality:
            return ""
        if self.state_code:
            return f"{self.municipality}, {self.state_code}"
        return self.municipality

    def full_address(self) -> str:
        parts = [self.full_street(), self.neighborhood, self.full_municipality(), self.postal_code]
        return ", ".join(part for part in parts if part)

    def __str__(self):
        return f"StandardAddress: {self.full_address() or 'Empty address'}"


@dataclass(frozen=True)
class AddressSnapshot:
    """Raw provider payload plus its standardized form."""
    raw: Any
    standardized: StandardAddress


def _first(address: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = address.get(key)
        if value:
            return value
    return None


def extract_state_code(iso3166_code: Optional[str]) -> Optional[str]:
    """Extract the two-letter state code from an ISO 3166-2 code like "BR-SP"."""
    if not iso3166_code or not isinstance(iso3166_code, str):
        return None
    match = STATE_CODE_RE.match(iso3166_code)
    return match.group(1) if match else None


def standardize(raw: Any) -> StandardAddress:
    """
    Build a StandardAddress from a Nominatim reverse payload.

    Priority of the locale-specific keys per component:
        street: addr:street > road > street > pedestrian
        neighborhood: addr:neighbourhood > neighbourhood > suburb > quarter
        municipality: addr:city > city > town > municipality > village
        state: addr:state > state

    Returns an empty StandardAddress when the payload has no "address".
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("address"), dict):
        logger.debug("No address components found")
        return StandardAddress()

    address = raw["address"]
    state = _first(address, "addr:state", "state")
    state_code = address.get("state_code") or extract_state_code(address.get("ISO3166-2-lvl4"))
    if state and re.match(r"^[A-Z]{2}$", state):
        state_code = state

    return StandardAddress(
        street=_first(address, "addr:street", "road", "street", "pedestrian"),
        house_number=_first(address, "addr:housenumber", "house_number"),
        neighborhood=_first(address, "addr:neighbourhood", "neighbourhood", "suburb", "quarter"),
        municipality=_first(address, "addr:city", "city", "town", "municipality", "village"),
        state=state,
        state_code=state_code,
        postal_code=_first(address, "addr:postcode", "postcode"),
        country=address.get("country"),
    )
