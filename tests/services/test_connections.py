"""Tests for the in-memory connection registry."""

from maskoff.services.connections import ConnectionRegistry, InMemoryConnectionRegistry
from tests.fakes import FakeChannel


def test_register_and_get() -> None:
    registry = InMemoryConnectionRegistry()
    channel = FakeChannel()

    registry.register("u-alice", channel)

    assert isinstance(registry, ConnectionRegistry)
    assert registry.get("u-alice") is channel
    assert registry.get("u-bob") is None
    assert registry.connected_subjects() == ["u-alice"]


def test_new_registration_replaces_previous() -> None:
    """A user reconnecting from a new socket keeps only the newest channel."""
    registry = InMemoryConnectionRegistry()
    old, new = FakeChannel(), FakeChannel()

    registry.register("u-alice", old)
    registry.register("u-alice", new)

    assert registry.get("u-alice") is new
    assert len(registry) == 1


def test_unregister_by_channel_returns_subject() -> None:
    registry = InMemoryConnectionRegistry()
    alice_channel, bob_channel = FakeChannel(), FakeChannel()
    registry.register("u-alice", alice_channel)
    registry.register("u-bob", bob_channel)

    assert registry.unregister_by_channel(alice_channel) == "u-alice"
    assert registry.get("u-alice") is None
    assert registry.get("u-bob") is bob_channel


def test_unregister_unknown_channel_is_noop() -> None:
    registry = InMemoryConnectionRegistry()
    registry.register("u-alice", FakeChannel())

    assert registry.unregister_by_channel(FakeChannel()) is None
    assert registry.connected_subjects() == ["u-alice"]


def test_closing_replaced_channel_keeps_new_one() -> None:
    """Closing a superseded socket must not evict its replacement."""
    registry = InMemoryConnectionRegistry()
    old, new = FakeChannel(), FakeChannel()
    registry.register("u-alice", old)
    registry.register("u-alice", new)

    assert registry.unregister_by_channel(old) is None
    assert registry.get("u-alice") is new
