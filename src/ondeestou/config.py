"""Configuration management."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
# Try to load from standard locations
env_paths = [
    Path(".env"),  # Current directory
    Path(__file__).parent.parent.parent / ".env",  # Project root
]
for env_path in env_paths:
    if env_path.exists():
        load_dotenv(env_path)
        break
else:
    # Fallback: try default load_dotenv() behavior
    load_dotenv()


def _get_list(name: str, default: str) -> list:
    """Read a comma separated list from the environment."""
    value = os.getenv(name, default)
    return [item.strip() for item in value.split(",") if item.strip()]


# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Device profile: "mobile" or "desktop" (selects the accuracy thresholds)
DEVICE_PROFILE = os.getenv("DEVICE_PROFILE", "desktop").lower()

# Language used for reverse geocoding results
LANGUAGE = os.getenv("LANGUAGE", "pt-BR")

# Position gatekeeping
# FullUpdate when the observer moved at least MINIMUM_DISTANCE_CHANGE metres
# or TRACKING_INTERVAL seconds passed since the last full update.
# LightUpdate otherwise, at most once every LIGHT_UPDATE_INTERVAL seconds.
MINIMUM_DISTANCE_CHANGE = float(os.getenv("MINIMUM_DISTANCE_CHANGE", "20"))
TRACKING_INTERVAL = float(os.getenv("TRACKING_INTERVAL", "50"))
LIGHT_UPDATE_INTERVAL = float(os.getenv("LIGHT_UPDATE_INTERVAL", "5"))

# Accuracy quality buckets that are flagged with an AccuracyError
MOBILE_NOT_ACCEPTED_ACCURACY = _get_list("MOBILE_NOT_ACCEPTED_ACCURACY", "medium,bad,very bad")
DESKTOP_NOT_ACCEPTED_ACCURACY = _get_list("DESKTOP_NOT_ACCEPTED_ACCURACY", "bad,very bad")

# Nominatim reverse geocoding API
NOMINATIM_API_URL = os.getenv("NOMINATIM_API_URL", "https://nominatim.openstreetmap.org/reverse")
NOMINATIM_RATE_LIMIT_SECONDS = float(os.getenv("NOMINATIM_RATE_LIMIT_SECONDS", "1"))  # Nominatim requires max 1 request per second
NOMINATIM_TIMEOUT = float(os.getenv("NOMINATIM_TIMEOUT", "10"))  # seconds
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "Ondeestou/0.7")
NOMINATIM_ZOOM = 18

# Address cache
CACHE_MAX_SIZE = int(os.getenv("CACHE_MAX_SIZE", "50"))
CACHE_EXPIRATION_SECONDS = float(os.getenv("CACHE_EXPIRATION_SECONDS", "300"))
CACHE_KEY_PRECISION = 4  # decimal places for lat/lon

# Notification queue
QUEUE_MAX_SIZE = int(os.getenv("QUEUE_MAX_SIZE", "100"))
QUEUE_EXPIRATION_SECONDS = float(os.getenv("QUEUE_EXPIRATION_SECONDS", "30"))
QUEUE_TIMER_INTERVAL = float(os.getenv("QUEUE_TIMER_INTERVAL", "5"))  # seconds between spoken items

# Speak the full address after every full position update
ANNOUNCE_FULL_ADDRESS = os.getenv("ANNOUNCE_FULL_ADDRESS", "true").lower() == "true"

# Project information
PROJECT_NAME = "Ondeestou"


def not_accepted_accuracy(profile: str = DEVICE_PROFILE) -> list:
    """Accuracy buckets that are not acceptable for a device profile."""
    if profile == "mobile":
        return list(MOBILE_NOT_ACCEPTED_ACCURACY)
    return list(DESKTOP_NOT_ACCEPTED_ACCURACY)
