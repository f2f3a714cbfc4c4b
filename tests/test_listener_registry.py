"""Tests for the event listener registry and its live bindings."""
import pytest

from conftest import FakeTransport
from sockettester.core.events import ListenerAdded, ListenerRemoved, ListenerUpdated
from sockettester.core.exceptions import DuplicateError, ValidationError
from sockettester.core.listener_registry import ListenerRegistry
from sockettester.core.message_log import MessageLog
from sockettester.core.models import StructuredPayload


@pytest.fixture
def log():
    return MessageLog()


@pytest.fixture
def registry(log):
    return ListenerRegistry(log)


def test_add_creates_active_listener(registry, log):
    listener = registry.add("  chat  ", "Chat messages")

    assert listener.event_name == "chat"
    assert listener.is_active
    assert listener.description == "Chat messages"
    assert registry.listeners == [listener]
    assert log.last.formatted_data == "Added event listener for: chat"


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_rejects_empty_names(registry, name):
    with pytest.raises(ValidationError):
        registry.add(name)
    assert len(registry) == 0


def test_add_rejects_duplicate_names(registry):
    registry.add("chat")
    with pytest.raises(DuplicateError) as exc_info:
        registry.add("chat")
    assert 'Event listener for "chat" already exists' in str(exc_info.value)
    assert len(registry) == 1


def test_add_defaults_is_silent_and_skips_existing(registry, log):
    registry.add("chat")
    before = len(log)

    created = registry.add_defaults(["connect", "chat", "message"], "Default")

    assert [listener.event_name for listener in created] == ["connect", "message"]
    assert len(log) == before
    assert len(registry) == 3


def test_add_while_detached_does_not_touch_transport(registry):
    transport = FakeTransport()
    registry.add("chat")
    assert transport.on_calls == []
    assert not registry.attached


def test_remove(registry, log):
    listener = registry.add("chat")
    removed = registry.remove(listener.id)

    assert removed == listener
    assert len(registry) == 0
    assert log.last.formatted_data == "Removed event listener for: chat"


def test_remove_unknown_id_is_noop(registry, log):
    registry.add("chat")
    before = len(log)
    assert registry.remove("missing") is None
    assert len(registry) == 1
    assert len(log) == before


def test_toggle_is_its_own_inverse(registry, log):
    listener = registry.add("chat")

    disabled = registry.toggle(listener.id)
    assert not disabled.is_active
    assert log.last.formatted_data == 'Event listener "chat" disabled'

    enabled = registry.toggle(listener.id)
    assert enabled.is_active
    assert enabled.id == listener.id
    assert log.last.formatted_data == 'Event listener "chat" enabled'


def test_toggle_unknown_id_is_noop(registry):
    assert registry.toggle("missing") is None


def test_attach_binds_each_active_listener_once(registry):
    registry.add("chat")
    inactive = registry.add("typing")
    registry.toggle(inactive.id)
    transport = FakeTransport()

    bound = registry.attach(transport)

    assert bound == 1
    assert transport.on_calls == ["chat"]
    assert registry.bound_events == ["chat"]


def test_reattach_does_not_duplicate_bindings(registry):
    registry.add("chat")
    transport = FakeTransport()
    registry.attach(transport)
    registry.attach(transport)

    assert list(transport.handlers) == ["chat"]
    assert registry.bound_events == ["chat"]


def test_bound_handler_logs_inbound_messages(registry, log):
    registry.add("chat")
    transport = FakeTransport()
    registry.attach(transport)

    transport.receive("chat", {"text": "hi"})

    assert log.last.event == "chat"
    assert not log.last.is_outgoing
    assert log.last.data == StructuredPayload({"text": "hi"})


def test_changes_while_attached_update_bindings(registry):
    transport = FakeTransport()
    registry.attach(transport)

    listener = registry.add("chat")
    assert "chat" in transport.handlers

    registry.toggle(listener.id)
    assert "chat" not in transport.handlers

    registry.toggle(listener.id)
    registry.remove(listener.id)
    assert transport.off_calls == ["chat", "chat"]
    assert registry.bound_events == []


def test_detach_unbinds_but_keeps_definitions(registry):
    registry.add("chat")
    registry.add("message")
    transport = FakeTransport()
    registry.attach(transport)

    registry.detach()

    assert sorted(transport.off_calls) == ["chat", "message"]
    assert len(registry) == 2
    assert not registry.attached


def test_events_published_for_changes(registry):
    events = []
    registry.stream.subscribe(events.append, ListenerAdded, ListenerRemoved, ListenerUpdated)

    listener = registry.add("chat")
    registry.toggle(listener.id)
    registry.remove(listener.id)

    assert [type(event) for event in events] == [ListenerAdded, ListenerUpdated, ListenerRemoved]


def test_subscribe_receives_snapshots(registry):
    snapshots = []
    registry.subscribe(snapshots.append)

    registry.add("chat")
    registry.add("message")

    assert [len(snapshot) for snapshot in snapshots] == [1, 2]
