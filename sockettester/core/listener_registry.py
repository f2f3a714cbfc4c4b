"""Event listener registry for Socket Tester.

The registry holds the operator's declared listeners (event name, active flag)
and keeps the live transport's handler table in step with them. Definitions
can be edited while disconnected; they are wired to the transport when a
connection opens and unwired when it goes away, without ever being deleted
implicitly.
"""
import logging
import threading
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from .events import (
    EventStream, ListenerAdded, ListenerRemoved, ListenerUpdated, Unsubscribe
)
from .exceptions import DuplicateError, ValidationError
from .message_log import MessageLog
from .models import EventListener
from ..transport.base import Transport

logger = logging.getLogger(__name__)


class ListenerRegistry:
    """Maps event names to listener definitions and their live bindings."""

    def __init__(self, log: MessageLog, stream: Optional[EventStream] = None):
        self.log = log
        self.stream = stream or log.stream
        self._listeners: Dict[str, EventListener] = {}  # id -> listener, insertion ordered
        self._transport: Optional[Transport] = None
        self._bound: Dict[str, Callable] = {}  # event name -> live handler
        self._lock = threading.RLock()

    # --- Definitions ---

    def add(self, event_name: str, description: Optional[str] = None) -> EventListener:
        """
        Create an active listener and bind it if a transport is attached.

        Raises:
            ValidationError: If the name is empty or whitespace.
            DuplicateError: If a listener for the name already exists.
        """
        name = (event_name or "").strip()
        if not name:
            raise ValidationError("Please enter an event name", field="event_name")
        with self._lock:
            if self.find_by_name(name) is not None:
                raise DuplicateError(name)
            listener = EventListener(event_name=name, is_active=True, description=description)
            self._listeners[listener.id] = listener
            if self._transport is not None:
                self._bind(listener)
        self.stream.publish(ListenerAdded(listener))
        self.log.system(f"Added event listener for: {name}")
        return listener

    def add_defaults(self, names: Iterable[str], description: Optional[str] = None) -> List[EventListener]:
        """Register bootstrap listeners silently, skipping names already present."""
        created = []
        with self._lock:
            for name in names:
                if self.find_by_name(name) is not None:
                    continue
                listener = EventListener(event_name=name, is_active=True, description=description)
                self._listeners[listener.id] = listener
                if self._transport is not None:
                    self._bind(listener)
                created.append(listener)
        for listener in created:
            self.stream.publish(ListenerAdded(listener))
        return created

    def remove(self, listener_id: str) -> Optional[EventListener]:
        """Delete a listener; unknown ids are ignored."""
        with self._lock:
            listener = self._listeners.pop(listener_id, None)
            if listener is None:
                logger.debug(f"Ignoring removal of unknown listener {listener_id}")
                return None
            self._unbind(listener.event_name)
        self.stream.publish(ListenerRemoved(listener))
        self.log.system(f"Removed event listener for: {listener.event_name}")
        return listener

    def toggle(self, listener_id: str) -> Optional[EventListener]:
        """Flip a listener's active flag, binding or unbinding it when attached."""
        with self._lock:
            listener = self._listeners.get(listener_id)
            if listener is None:
                logger.debug(f"Ignoring toggle of unknown listener {listener_id}")
                return None
            updated = listener.with_active(not listener.is_active)
            self._listeners[listener_id] = updated
            if self._transport is not None:
                if updated.is_active:
                    self._bind(updated)
                else:
                    self._unbind(updated.event_name)
        self.stream.publish(ListenerUpdated(updated))
        state = "enabled" if updated.is_active else "disabled"
        self.log.system(f'Event listener "{updated.event_name}" {state}')
        return updated

    def get(self, listener_id: str) -> Optional[EventListener]:
        with self._lock:
            return self._listeners.get(listener_id)

    def find_by_name(self, event_name: str) -> Optional[EventListener]:
        with self._lock:
            for listener in self._listeners.values():
                if listener.event_name == event_name:
                    return listener
        return None

    @property
    def listeners(self) -> List[EventListener]:
        with self._lock:
            return list(self._listeners.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def __iter__(self) -> Iterator[EventListener]:
        return iter(self.listeners)

    def subscribe(self, callback: Callable[[List[EventListener]], None]) -> Unsubscribe:
        """Call ``callback(listeners)`` with a fresh snapshot after every change."""
        return self.stream.subscribe(
            lambda event: callback(self.listeners),
            ListenerAdded, ListenerRemoved, ListenerUpdated,
        )

    # --- Live bindings ---

    @property
    def attached(self) -> bool:
        return self._transport is not None

    @property
    def bound_events(self) -> List[str]:
        """Event names currently wired to the transport."""
        with self._lock:
            return list(self._bound)

    def attach(self, transport: Transport) -> int:
        """
        Wire every active listener to a freshly (re)connected transport.

        Each active listener is bound exactly once; binding replaces any
        handler the transport already holds for that name.
        Returns:
            int: Number of listeners bound.
        """
        with self._lock:
            if self._transport is not transport:
                self._bound.clear()
            self._transport = transport
            active = [listener for listener in self._listeners.values() if listener.is_active]
            for listener in active:
                self._bind(listener)
        logger.debug(f"Bound {len(active)} active listener(s)")
        return len(active)

    def detach(self) -> None:
        """Drop all live bindings, keeping the definitions."""
        with self._lock:
            transport = self._transport
            self._transport = None
            names = list(self._bound)
            self._bound.clear()
        if transport is None:
            return
        for name in names:
            try:
                transport.off(name)
            except Exception as e:
                logger.warning(f"Error removing handler for {name}: {e}")

    def _bind(self, listener: EventListener) -> None:
        name = listener.event_name

        def handler(data=None):
            self.log.inbound(name, data)

        self._transport.on(name, handler)
        self._bound[name] = handler

    def _unbind(self, event_name: str) -> None:
        if self._bound.pop(event_name, None) is not None and self._transport is not None:
            self._transport.off(event_name)
