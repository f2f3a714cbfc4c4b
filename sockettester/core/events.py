"""Domain events and observable state for Socket Tester.

Every mutation of the connection status, the current error, the listener
registry or the message log is published on one ``EventStream`` as a typed
event. Front ends subscribe to the stream (optionally filtered by event type)
and get an unsubscribe callable back. Notification is synchronous and happens
after the mutation is complete.

Key Features:
- Tagged event types instead of per-purpose callback setters
- Type-filtered subscriptions with unsubscribe handles
- Thread-safe subscriber bookkeeping
- Failing subscribers are logged and skipped
"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Tuple, Type, TypeVar

from .connection_status import ConnectionStatus
from .models import EventListener, Message

logger = logging.getLogger(__name__)


class DomainEvent:
    """Base class for everything published on the event stream."""


@dataclass(frozen=True)
class StatusChanged(DomainEvent):
    old: ConnectionStatus
    new: ConnectionStatus

    @property
    def value(self) -> ConnectionStatus:
        return self.new


@dataclass(frozen=True)
class ErrorChanged(DomainEvent):
    error: Optional[Exception]

    @property
    def value(self) -> Optional[Exception]:
        return self.error


@dataclass(frozen=True)
class UrlChanged(DomainEvent):
    url: Optional[str]

    @property
    def value(self) -> Optional[str]:
        return self.url


@dataclass(frozen=True)
class MessageAppended(DomainEvent):
    message: Message


@dataclass(frozen=True)
class LogCleared(DomainEvent):
    pass


@dataclass(frozen=True)
class ListenerAdded(DomainEvent):
    listener: EventListener


@dataclass(frozen=True)
class ListenerRemoved(DomainEvent):
    listener: EventListener


@dataclass(frozen=True)
class ListenerUpdated(DomainEvent):
    listener: EventListener


Subscriber = Callable[[DomainEvent], None]
Unsubscribe = Callable[[], None]


class EventStream:
    """Synchronous publish/subscribe channel for domain events."""

    def __init__(self):
        self._subscribers: List[Tuple[Subscriber, Tuple[Type[DomainEvent], ...]]] = []
        self._lock = threading.RLock()

    def subscribe(self, callback: Subscriber, *event_types: Type[DomainEvent]) -> Unsubscribe:
        """
        Register a callback for all events, or only for the given types.

        Returns:
            A callable that removes the subscription. Calling it twice is harmless.
        """
        entry = (callback, tuple(event_types))
        with self._lock:
            self._subscribers.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return unsubscribe

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback, event_types in subscribers:
            if event_types and not isinstance(event, event_types):
                continue
            try:
                callback(event)
            except Exception:
                logger.exception(f"Error in subscriber for {type(event).__name__}")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


T = TypeVar("T")


class ObservableValue(Generic[T]):
    """A single value whose changes are published as domain events.

    ``make_event(old, new)`` builds the event published on each change; the
    event class must expose the new value as ``value``.
    """

    def __init__(self, initial: T, stream: EventStream,
                 make_event: Callable[[T, T], DomainEvent]):
        self._value = initial
        self._stream = stream
        self._make_event = make_event
        self._event_type = type(make_event(initial, initial))
        self._lock = threading.RLock()

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> bool:
        """Store a new value; returns False (and publishes nothing) if unchanged."""
        with self._lock:
            old = self._value
            if old is value or old == value:
                return False
            self._value = value
            event = self._make_event(old, value)
        self._stream.publish(event)
        return True

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        """Call ``callback(new_value)`` after every change of this value."""
        return self._stream.subscribe(lambda event: callback(event.value), self._event_type)
