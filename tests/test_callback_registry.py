"""Tests for the callback registry."""

import pytest

from ondeestou.callback_registry import CallbackRegistry


def test_register_and_invoke():
    """Test callbacks receive the new and old value."""
    registry = CallbackRegistry()
    calls = []
    registry.register("neighborhood", lambda new, old: calls.append((new, old)))

    assert registry.invoke("neighborhood", "Centro", "Bela Vista") == 1
    assert calls == [("Centro", "Bela Vista")]


def test_invoke_runs_in_registration_order():
    registry = CallbackRegistry()
    calls = []
    registry.register("street", lambda new, old: calls.append("first"))
    registry.register("street", lambda new, old: calls.append("second"))

    registry.invoke("street", "Rua B", "Rua A")

    assert calls == ["first", "second"]


def test_failing_callback_does_not_block_others():
    """Test an exception in one callback is contained."""
    registry = CallbackRegistry()
    calls = []

    def broken(new, old):
        raise RuntimeError("boom")

    registry.register("municipality", broken)
    registry.register("municipality", lambda new, old: calls.append(new))

    succeeded = registry.invoke("municipality", "Santos", "São Paulo")

    assert succeeded == 1
    assert calls == ["Santos"]


def test_invoke_unknown_field():
    assert CallbackRegistry().invoke("street", "a", "b") == 0


def test_unregister_by_identity():
    registry = CallbackRegistry()
    calls = []

    def callback(new, old):
        calls.append(new)

    registry.register("street", callback)
    assert registry.unregister("street", callback) is True
    assert registry.unregister("street", callback) is False
    assert not registry.has("street")

    registry.invoke("street", "Rua A", None)
    assert calls == []


def test_register_rejects_non_callable():
    with pytest.raises(TypeError):
        CallbackRegistry().register("street", "not callable")


def test_registered_fields_and_len():
    registry = CallbackRegistry()
    registry.register("street", print)
    registry.register("neighborhood", print)
    registry.register("neighborhood", repr)
    assert sorted(registry.registered_fields()) == ["neighborhood", "street"]
    assert len(registry) == 3
    registry.clear()
    assert len(registry) == 0
