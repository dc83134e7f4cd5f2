"""Events exchanged between the pipeline stages.

Position events (published by the gatekeeper):
    FullUpdate | LightUpdate | NotUpdated
Address events (published by the reverse geocoder):
    AddressResolved | AddressFailed
Cache events (published by the address cache):
    CacheUpdated
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .errors import AccuracyError, NetworkError, ValidationError
from .position import Position


@dataclass(frozen=True)
class FullUpdate:
    """Significant move (or long interval): the position was accepted."""
    source: Any
    position: Position
    error: Optional[AccuracyError] = None


@dataclass(frozen=True)
class LightUpdate:
    """Small move inside the tracking interval: cheaper downstream handling."""
    source: Any
    position: Position
    error: Optional[AccuracyError] = None


@dataclass(frozen=True)
class NotUpdated:
    """The position was seen but not published as an update."""
    source: Any
    reason: str
    position: Optional[Position] = None


@dataclass(frozen=True)
class Rejected:
    """Returned by the gatekeeper for malformed input, never published."""
    error: ValidationError


PositionEvent = Union[FullUpdate, LightUpdate, NotUpdated]


@dataclass(frozen=True)
class AddressResolved:
    source: Any
    raw: Any
    standardized: Any
    latitude: float
    longitude: float
    request_id: int
    trigger: Optional[PositionEvent] = None
    loading: bool = False
    error: None = None


@dataclass(frozen=True)
class AddressFailed:
    source: Any
    error: NetworkError
    latitude: float
    longitude: float
    request_id: int
    trigger: Optional[PositionEvent] = None
    loading: bool = False


AddressEvent = Union[AddressResolved, AddressFailed]


@dataclass(frozen=True)
class CacheUpdated:
    """Published by the address cache after every accepted address."""
    source: Any
    snapshot: Any
    changes: List[Any] = field(default_factory=list)
    cache_size: int = 0
