"""Connection lifecycle controller for Socket Tester.

This module implements the object a front end drives: it owns the single
transport handle, the connection status, the listener registry and the message
log, and is the only mutation surface for them.

Key Features:
- connect/disconnect with teardown-before-connect and cancellable attempts
- Status state machine fed by transport signals (never auto-disconnects)
- Listener registry kept in sync with the live transport on every (re)connect
- send with JSON-or-text payloads
- Errors caught at the operation boundary and exposed as observable state

All lifecycle operations serialize on one asyncio lock, so a "check status,
then act" sequence never sees a value changed halfway through.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .connection_status import ESTABLISHED, ConnectionStatus, TransportSignal, next_status
from .events import ErrorChanged, EventStream, ObservableValue, StatusChanged, UrlChanged
from .exceptions import (
    NotConnectedError, SocketTesterError, TransportError, ValidationError
)
from .listener_registry import ListenerRegistry
from .message_log import MessageLog
from .models import EventListener, Message, parse_payload, payload_to_wire
from ..transport.base import Transport
from ..utils.network_utils import is_absolute_url

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], Transport]


def validate_url(url: str) -> str:
    """
    Check that a URL is absolute (has a scheme and a host).

    Returns:
        str: The stripped URL.
    Raises:
        ValidationError: If the URL is empty or not absolute.
    """
    candidate = (url or "").strip()
    if not candidate:
        raise ValidationError("Please enter a WebSocket URL", field="url")
    if not is_absolute_url(candidate):
        raise ValidationError(
            f"Please enter a valid URL (e.g., http://localhost:3000), got '{candidate}'", field="url")
    return candidate


def _default_transport_factory() -> Transport:
    from ..transport.socketio_transport import SocketIOTransport
    return SocketIOTransport()


class SocketTestController:
    """Owns one logical Socket.IO connection and everything observed about it."""

    def __init__(self,
                 transport_factory: Optional[TransportFactory] = None,
                 transport_options: Optional[Dict[str, Any]] = None,
                 default_listeners: Optional[Iterable[str]] = None,
                 default_description: Optional[str] = "Default Socket.IO event"):
        self.stream = EventStream()
        self.log = MessageLog(self.stream)
        self.registry = ListenerRegistry(self.log, self.stream)

        self._status: ObservableValue[ConnectionStatus] = ObservableValue(
            ConnectionStatus.DISCONNECTED, self.stream, StatusChanged)
        self._error: ObservableValue[Optional[Exception]] = ObservableValue(
            None, self.stream, lambda old, new: ErrorChanged(new))
        self._url: ObservableValue[Optional[str]] = ObservableValue(
            None, self.stream, lambda old, new: UrlChanged(new))

        self._transport_factory = transport_factory or _default_transport_factory
        self._transport_options = dict(transport_options or {})
        self._transport: Optional[Transport] = None
        self._lock = asyncio.Lock()

        if default_listeners:
            self.registry.add_defaults(default_listeners, default_description)

    @classmethod
    def from_config(cls, config_manager, transport_factory: Optional[TransportFactory] = None,
                    with_defaults: bool = True) -> "SocketTestController":
        """Build a controller from a ``ConfigManager``."""
        listeners = config_manager.section("listeners")
        return cls(
            transport_factory=transport_factory,
            transport_options=config_manager.section("transport"),
            default_listeners=listeners.get("defaults") if with_defaults else None,
            default_description=listeners.get("default_description"),
        )

    # --- Observable state ---

    @property
    def status(self) -> ConnectionStatus:
        return self._status.value

    @property
    def error(self) -> Optional[Exception]:
        """The most recent operation error, or None."""
        return self._error.value

    @property
    def url(self) -> Optional[str]:
        """Target URL of the current (or last failed) connection."""
        return self._url.value

    @property
    def transport(self) -> Optional[Transport]:
        return self._transport

    @property
    def messages(self) -> List[Message]:
        return self.log.messages

    @property
    def listeners(self) -> List[EventListener]:
        return self.registry.listeners

    def subscribe_status(self, callback: Callable[[ConnectionStatus], None]):
        return self._status.subscribe(callback)

    def subscribe_error(self, callback: Callable[[Optional[Exception]], None]):
        return self._error.subscribe(callback)

    def subscribe_url(self, callback: Callable[[Optional[str]], None]):
        return self._url.subscribe(callback)

    def subscribe(self, callback, *event_types):
        """Subscribe to the domain event stream (all events or the given types)."""
        return self.stream.subscribe(callback, *event_types)

    # --- Connection lifecycle ---

    async def connect(self, url: str) -> bool:
        """
        Start connecting to a Socket.IO server.

        Returns once the attempt has been issued; the outcome shows up in
        ``status`` and the message log.
        Returns:
            bool: False if the URL was rejected or the attempt could not start.
        """
        try:
            target = validate_url(url)
        except ValidationError as e:
            self._report(e)
            return False

        async with self._lock:
            self._error.set(None)
            if self._transport is not None:
                await self._teardown()
                self.log.system("Disconnected from WebSocket server")

            self._url.set(target)
            self._set_status(ConnectionStatus.CONNECTING)
            try:
                transport = self._transport_factory()
            except Exception as e:
                self._set_status(ConnectionStatus.ERROR)
                self._report(TransportError(f"Could not create transport: {e}"),
                             f"Failed to connect to {target}: {e}")
                return False
            transport.set_signal_handler(
                lambda signal, detail=None: self._on_transport_signal(transport, signal, detail))
            self._transport = transport
            self.log.system(f"Attempting to connect to: {target}")
            try:
                await transport.open(target, self._transport_options)
            except TransportError as e:
                self._set_status(ConnectionStatus.ERROR)
                self._report(e, f"Failed to connect to {target}: {e.message}")
                return False
        return True

    async def disconnect(self) -> None:
        """Tear down the connection. Never raises; works with nothing connected."""
        async with self._lock:
            self._error.set(None)
            await self._teardown()
            self._set_status(ConnectionStatus.DISCONNECTED)
            self.log.system("Disconnected from WebSocket server")

    async def shutdown(self) -> None:
        """Release the transport when the front end exits."""
        if self._transport is not None:
            await self.disconnect()

    async def _teardown(self) -> None:
        transport, self._transport = self._transport, None
        self.registry.detach()
        if transport is None:
            return
        transport.set_signal_handler(None)
        try:
            await transport.close()
        except TransportError as e:
            self._report(e, f"WebSocket disconnection error: {e.message}")
        except Exception as e:
            self._report(TransportError(str(e)), f"WebSocket disconnection error: {e}")

    def _on_transport_signal(self, transport: Transport, signal: TransportSignal, detail: Any = None) -> None:
        if transport is not self._transport:
            logger.debug(f"Ignoring {signal.value} from a replaced transport")
            return

        current = self.status
        if signal is TransportSignal.OPEN:
            self.log.system("WebSocket connected successfully")
        elif signal is TransportSignal.ERROR:
            if current in ESTABLISHED:
                self.log.system(f"WebSocket error: {detail}")
            else:
                self._report(TransportError(f"WebSocket connection error: {detail}"))
        elif signal is TransportSignal.CLOSE:
            self.log.system(f"WebSocket disconnected: {detail}")
        elif signal is TransportSignal.RECONNECT_ATTEMPT:
            self.log.system(f"WebSocket reconnecting... ({detail})")
        elif signal is TransportSignal.RECONNECT_ERROR:
            self.log.system(f"WebSocket reconnection error: {detail}")
        elif signal is TransportSignal.RECONNECT_SUCCESS:
            self.log.system("WebSocket reconnected")

        new_status = next_status(current, signal)
        if new_status is not None:
            self._set_status(new_status)

        if signal in (TransportSignal.OPEN, TransportSignal.RECONNECT_SUCCESS):
            self.registry.attach(transport)
        elif signal is TransportSignal.CLOSE:
            self.registry.detach()

    def _set_status(self, status: ConnectionStatus) -> None:
        old = self._status.value
        if self._status.set(status):
            logger.info(f"Status {old.value} -> {status.value}")

    # --- Sending ---

    async def send(self, event_name: str, raw_text: str) -> bool:
        """
        Emit an event whose payload is parsed as JSON, or sent as text.

        Failures only update ``error``; nothing is logged unless the emit
        succeeded.
        """
        try:
            async with self._lock:
                if self.status is not ConnectionStatus.CONNECTED or self._transport is None:
                    raise NotConnectedError()
                name = (event_name or "").strip()
                if not name:
                    raise ValidationError("Please enter an event name", field="event_name")
                text = (raw_text or "").strip()
                if not text:
                    raise ValidationError("Please enter a message", field="message")

                payload = parse_payload(text)
                await self._transport.emit(name, payload_to_wire(payload))
                self.log.outbound(name, payload)
                self._error.set(None)
                return True
        except SocketTesterError as e:
            self._report(e, log=False)
            return False

    # --- Listeners ---

    def add_listener(self, event_name: str, description: Optional[str] = "Custom event listener") -> Optional[EventListener]:
        try:
            listener = self.registry.add(event_name, description)
        except SocketTesterError as e:
            self._report(e)
            return None
        self._error.set(None)
        return listener

    def remove_listener(self, listener_id: str) -> Optional[EventListener]:
        return self.registry.remove(listener_id)

    def toggle_listener(self, listener_id: str) -> Optional[EventListener]:
        return self.registry.toggle(listener_id)

    def clear_messages(self) -> Message:
        return self.log.clear()

    # --- Errors ---

    def _report(self, error: SocketTesterError, text: Optional[str] = None, log: bool = True) -> None:
        logger.warning(f"{type(error).__name__}: {error}")
        self._error.set(error)
        if log:
            self.log.system(text or str(error))
