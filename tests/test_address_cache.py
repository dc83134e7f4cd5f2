"""Tests for the address cache facade."""

import pytest

from ondeestou.address import standardize
from ondeestou.address_cache import AddressCache
from ondeestou.change_detector import ChangeRecord
from ondeestou.errors import NetworkError
from ondeestou.events import AddressFailed, AddressResolved, CacheUpdated

from conftest import nominatim_payload


@pytest.fixture
def cache():
    return AddressCache(max_size=3, expiration_seconds=None)


def accept(cache, lat=-23.5505, lon=-46.6333, **address):
    raw = nominatim_payload(lat, lon, **address)
    return cache.accept(raw, standardize(raw))


def test_first_address_has_no_changes(cache, recorder):
    """Test the first address cannot be compared with anything."""
    cache.subscribe(recorder)
    calls = []
    cache.register_callback("neighborhood", lambda new, old: calls.append((new, old)))

    changes = accept(cache, city="São Paulo", suburb="Bela Vista")

    assert changes == []
    assert calls == []
    assert cache.current.standardized.neighborhood == "Bela Vista"
    assert cache.previous is None
    assert len(recorder.events) == 1
    assert isinstance(recorder.events[0], CacheUpdated)
    assert recorder.events[0].changes == []


def test_neighborhood_change_fires_callback(cache, recorder):
    """Test a changed field invokes its callbacks and is published."""
    cache.subscribe(recorder)
    calls = []
    cache.register_callback("neighborhood", lambda new, old: calls.append((new, old)))
    cache.register_callback("municipality", lambda new, old: calls.append(("municipality", new)))

    accept(cache, city="São Paulo", suburb="Bela Vista")
    changes = accept(cache, city="São Paulo", suburb="Centro")

    assert changes == [ChangeRecord("neighborhood", "Bela Vista", "Centro")]
    assert calls == [("Centro", "Bela Vista")]
    assert recorder.events[-1].changes == changes
    assert cache.previous.standardized.neighborhood == "Bela Vista"


def test_same_address_fires_no_callbacks(cache, recorder):
    cache.subscribe(recorder)
    calls = []
    for field_name in ("municipality", "neighborhood", "street"):
        cache.register_callback(field_name, lambda new, old: calls.append(new))

    accept(cache, city="São Paulo", suburb="Bela Vista", road="Rua Augusta")
    changes = accept(cache, city="São Paulo", suburb="Bela Vista", road="Rua Augusta")

    assert changes == []
    assert calls == []
    assert recorder.events[-1].changes == []


def test_failing_callback_is_contained(cache):
    calls = []
    cache.register_callback("street", lambda new, old: 1 / 0)
    cache.register_callback("street", lambda new, old: calls.append(new))

    accept(cache, road="Rua A")
    accept(cache, road="Rua B")

    assert calls == ["Rua B"]


def test_function_subscribers_receive_cache_updates(cache):
    received = []
    cache.subscribe_function(received.append)
    accept(cache, city="Santos")
    assert received[0].cache_size == 1
    assert received[0].snapshot is cache.current


def test_keyed_cache_uses_coordinate_fingerprint(cache):
    """Test resolved coordinates can be looked up again."""
    accept(cache, -23.55052, -46.63331, city="São Paulo")

    hit = cache.lookup(-23.5505, -46.6333)

    assert hit is not None
    assert hit.standardized.municipality == "São Paulo"
    assert cache.lookup(0.0, 0.0) is None


def test_keyed_cache_is_bounded(cache):
    for i in range(4):
        accept(cache, float(i), 0.0, city=f"City {i}")
    assert cache.cache_size == 3
    assert cache.lookup(0.0, 0.0) is None
    assert cache.lookup(3.0, 0.0) is not None


def test_cache_key_falls_back_to_components(cache):
    raw = {"address": {"road": "Rua A", "city": "Serro", "country_code": "br"}}
    assert cache.cache_key(raw) == "Rua A|Serro|br"
    assert cache.cache_key({"display_name": "?"}) is None


def test_explicit_coordinates_override_payload(cache):
    raw = nominatim_payload(1.0, 1.0, city="A")
    assert cache.cache_key(raw, 2.0, 3.0) == "2.0000,3.0000"


def test_update_accepts_resolved_events(cache):
    raw = nominatim_payload(city="São Paulo")
    event = AddressResolved(None, raw, standardize(raw), -23.5505, -46.6333, 1)

    cache.update(event)

    assert cache.current.raw == raw
    assert cache.lookup(-23.5505, -46.6333) is not None


def test_update_ignores_failures(cache, recorder):
    cache.subscribe(recorder)
    cache.update(AddressFailed(None, NetworkError("offline"), 1.0, 2.0, 1))
    assert cache.current is None
    assert recorder.events == []


def test_accept_standardizes_when_needed(cache):
    cache.accept(nominatim_payload(town="Serro"))
    assert cache.current.standardized.municipality == "Serro"


def test_clear(cache):
    accept(cache, city="A")
    cache.clear()
    assert cache.current is None
    assert cache.cache_size == 0


def test_unregister_callback(cache):
    calls = []

    def callback(new, old):
        calls.append(new)

    cache.register_callback("municipality", callback)
    assert cache.unregister_callback("municipality", callback)
    accept(cache, city="A")
    accept(cache, city="B")
    assert calls == []
