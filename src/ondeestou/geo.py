"""Geodesic helpers."""

import math

EARTH_RADIUS_M = 6371000  # Earth's radius in meters


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate great circle distance between two GPS points in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def coordinate_key(lat: float, lon: float, precision: int) -> str:
    """Fingerprint a coordinate pair by rounding it, e.g. "-23.5505,-46.6333"."""
    return f"{lat:.{precision}f},{lon:.{precision}f}"
