"""Shared test fixtures."""

import asyncio
import pytest


def nominatim_payload(lat=-23.5505, lon=-46.6333, **address):
    """Build a Nominatim-like reverse geocoding payload."""
    return {
        "lat": str(lat),
        "lon": str(lon),
        "display_name": ", ".join(str(v) for v in address.values()),
        "address": dict(address),
    }


class FakeClient:
    """Reverse geocoding client answering from a list of payloads (or errors)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def fetch(self, lat, lon):
        self.calls.append((lat, lon))
        await asyncio.sleep(0)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class Recorder:
    """Object subscriber that records every event."""

    def __init__(self):
        self.events = []

    def update(self, *args):
        self.events.append(args[0] if len(args) == 1 else args)


@pytest.fixture
def recorder():
    return Recorder()
