"""Tests for announcement texts and priorities."""

import pytest

from ondeestou.address import StandardAddress, standardize
from ondeestou.address_cache import AddressCache
from ondeestou.announcer import (
    ChangeAnnouncer, full_address_text, municipality_text, neighborhood_text, street_text,
)
from ondeestou.events import AddressResolved, FullUpdate, LightUpdate
from ondeestou.notification_queue import PriorityNotificationQueue
from ondeestou.position import Position

from conftest import nominatim_payload


@pytest.fixture
def cache():
    return AddressCache(expiration_seconds=None)


@pytest.fixture
def queue():
    return PriorityNotificationQueue(expiration_seconds=None)


@pytest.fixture
def announcer(cache, queue):
    return ChangeAnnouncer(cache, queue, announce_full_address=True)


def accept(cache, **address):
    cache.accept(nominatim_payload(**address))


def test_municipality_text():
    assert municipality_text("São Paulo", "Santos") == "Você saiu de Santos e entrou em São Paulo"
    assert municipality_text("São Paulo") == "Você entrou no município de São Paulo"
    assert municipality_text(None, "Santos") == "Novo município detectado"


def test_neighborhood_text():
    assert neighborhood_text("Centro") == "Você entrou no bairro Centro"
    assert neighborhood_text(None) == "Novo bairro detectado"


def test_street_text():
    address = StandardAddress(street="Rua Augusta", house_number="100")
    assert street_text(address) == "Você está agora em Rua Augusta, 100"
    assert street_text(None, "Rua Augusta") == "Você está agora em Rua Augusta"
    assert street_text(None) == "Nova localização detectada"


def test_full_address_text_levels():
    assert full_address_text(StandardAddress(
        street="Rua Augusta", neighborhood="Consolação", municipality="São Paulo"
    )) == "Você está em Rua Augusta, Consolação, São Paulo"
    assert full_address_text(StandardAddress(
        neighborhood="Copacabana", municipality="Rio de Janeiro"
    )) == "Você está em bairro Copacabana, Rio de Janeiro"
    assert full_address_text(StandardAddress(municipality="Serro")) == "Você está em Serro"
    assert full_address_text(StandardAddress()) == "Localização detectada, mas endereço não disponível"
    assert full_address_text(None) == "Localização não disponível"


def test_neighborhood_change_is_enqueued_with_priority_2(announcer, cache, queue):
    accept(cache, city="São Paulo", suburb="Bela Vista")
    accept(cache, city="São Paulo", suburb="Centro")

    item = queue.dequeue()
    assert (item.text, item.priority) == ("Você entrou no bairro Centro", 2)
    assert queue.is_empty()


def test_municipality_beats_street(announcer, cache, queue):
    """Test simultaneous changes dequeue by priority."""
    accept(cache, city="Santos", road="Rua A")
    accept(cache, city="São Paulo", road="Rua B")

    first, second = queue.dequeue(), queue.dequeue()
    assert (first.text, first.priority) == ("Você saiu de Santos e entrou em São Paulo", 3)
    assert (second.text, second.priority) == ("Você está agora em Rua B", 1)


def test_full_address_only_for_full_updates(announcer, queue):
    raw = nominatim_payload(city="São Paulo", suburb="Bela Vista")
    position = Position(-23.5505, -46.6333, timestamp=0)

    announcer.update(AddressResolved(None, raw, standardize(raw), -23.5505, -46.6333, 1,
                                     trigger=LightUpdate(None, position)))
    assert queue.is_empty()

    announcer.update(AddressResolved(None, raw, standardize(raw), -23.5505, -46.6333, 2,
                                     trigger=FullUpdate(None, position)))
    item = queue.dequeue()
    assert (item.text, item.priority) == ("Você está em bairro Bela Vista, São Paulo", 0)


def test_full_address_can_be_disabled(cache, queue):
    announcer = ChangeAnnouncer(cache, queue, announce_full_address=False)
    raw = nominatim_payload(city="São Paulo")
    announcer.update(AddressResolved(None, raw, standardize(raw), 0.0, 0.0, 1,
                                     trigger=FullUpdate(None, Position(0.0, 0.0, timestamp=0))))
    assert queue.is_empty()


def test_detach(announcer, cache, queue):
    announcer.detach()
    accept(cache, city="Santos")
    accept(cache, city="São Paulo")
    assert queue.is_empty()
