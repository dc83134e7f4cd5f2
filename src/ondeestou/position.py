"""Immutable GPS position."""

import math
import logging
from dataclasses import dataclass
from numbers import Real
from typing import Any, Optional

from .errors import ValidationError
from .geo import haversine_distance

logger = logging.getLogger(__name__)

POSITION_FIELDS = ("latitude", "longitude", "accuracy", "altitude", "heading", "speed", "timestamp")


def accuracy_quality(accuracy: Optional[float]) -> str:
    """
    Classify a GPS accuracy radius (metres) into a quality bucket.

    Returns one of "excellent", "good", "medium", "bad", "very bad",
    or "unknown" when the provider reported no accuracy.
    """
    if accuracy is None:
        return "unknown"
    if accuracy <= 10:
        return "excellent"
    elif accuracy <= 30:
        return "good"
    elif accuracy <= 100:
        return "medium"
    elif accuracy <= 200:
        return "bad"
    else:
        return "very bad"


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _read(raw: Any, name: str) -> Any:
    if isinstance(raw, dict):
        return raw.get(name)
    return getattr(raw, name, None)


@dataclass(frozen=True)
class Position:
    """
    GPS position with metadata.

    Instances are created once per accepted raw input and never mutated.
    Timestamps are seconds (as returned by time.time()).

    Raises:
        ValidationError: when latitude/longitude are missing, not numeric
            or out of range.
    """
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    heading: Optional[float] = None
    speed: Optional[float] = None
    timestamp: Optional[float] = None

    def __post_init__(self):
        if not _is_number(self.latitude) or not _is_number(self.longitude):
            raise ValidationError(
                f"Invalid coordinates: latitude={self.latitude!r}, longitude={self.longitude!r}"
            )
        if not -90 <= self.latitude <= 90:
            raise ValidationError(f"Latitude out of range [-90, 90]: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValidationError(f"Longitude out of range [-180, 180]: {self.longitude}")
        if self.timestamp is not None and not _is_number(self.timestamp):
            raise ValidationError(f"Invalid timestamp: {self.timestamp!r}")
        if self.accuracy is not None and (not _is_number(self.accuracy) or self.accuracy < 0):
            raise ValidationError(f"Invalid accuracy: {self.accuracy!r}")

    @classmethod
    def from_raw(cls, raw: Any) -> "Position":
        """
        Build a Position from a provider payload.

        Accepts a mapping or an object, either flat
        ({latitude, longitude, ..., timestamp}) or shaped like a browser
        GeolocationPosition ({coords: {...}, timestamp}). Short names
        "lat"/"lon" are accepted too.
        """
        if raw is None:
            raise ValidationError("Position data is missing")
        if isinstance(raw, Position):
            return raw

        coords = _read(raw, "coords") or raw
        values = {name: _read(coords, name) for name in POSITION_FIELDS}
        if values["latitude"] is None:
            values["latitude"] = _read(coords, "lat")
        if values["longitude"] is None:
            values["longitude"] = _read(coords, "lon")
        if values["timestamp"] is None:
            values["timestamp"] = _read(raw, "timestamp")
        return cls(**values)

    @property
    def accuracy_quality(self) -> str:
        return accuracy_quality(self.accuracy)

    def distance_to(self, other: "Position") -> float:
        """Distance in metres to another position."""
        return haversine_distance(self.latitude, self.longitude, other.latitude, other.longitude)

    def __str__(self):
        return (
            f"Position: {self.latitude}, {self.longitude}, {self.accuracy_quality}, "
            f"{self.altitude}, {self.speed}, {self.heading}, {self.timestamp}"
        )
