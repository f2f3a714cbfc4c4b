"""Socket.IO transport for Socket Tester.

This module adapts ``socketio.AsyncClient`` to the ``Transport`` interface. It
owns one client instance per connection attempt, translates the client's
connect/disconnect/connect_error events into lifecycle signals and dispatches
server events to the handlers the listener registry binds.

Key Features:
- Non-blocking open (the connect runs as a background task)
- ws:// and wss:// URLs accepted
- Automatic reconnection reported as reconnect_* signals
- Handler table with replace-on-bind and cheap unbind through a catch-all
- Idempotent close that also cancels a pending connect
"""
import asyncio
import logging
from typing import Any, Callable, Dict, Optional

import socketio

from .base import EventHandler, Transport, TransportSignal
from ..core.exceptions import SendError, TransportError
from ..utils.network_utils import to_socketio_url

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: Dict[str, Any] = {
    "transports": ["websocket"],
    "wait_timeout": 20,
    "reconnection": True,
    "reconnection_attempts": 0,
    "reconnection_delay": 1,
    "retry_initial_connect": True,
    "headers": {},
    "library_logging": False,
}


class SocketIOTransport(Transport):
    """Transport backed by python-socketio's asyncio client."""

    def __init__(self, client_factory: Callable[..., socketio.AsyncClient] = socketio.AsyncClient):
        super().__init__()
        self._client_factory = client_factory
        self._sio: Optional[socketio.AsyncClient] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._handlers: Dict[str, EventHandler] = {}
        self._options: Dict[str, Any] = dict(DEFAULT_OPTIONS)
        self._open = False
        self._closing = False
        self._reconnecting = False
        self._error_reported = False

    @property
    def connected(self) -> bool:
        # AsyncClient.connected only flips once connect() returns, after the connect handler ran
        return self._open

    @property
    def sid(self) -> Optional[str]:
        return self._sio.sid if self._sio is not None else None

    @property
    def handlers(self) -> Dict[str, EventHandler]:
        return dict(self._handlers)

    # --- Lifecycle ---

    async def open(self, url: str, options: Optional[Dict[str, Any]] = None) -> None:
        if self._sio is not None:
            raise TransportError("Transport already opened; create a new one per connection")
        self._options = {**DEFAULT_OPTIONS, **(options or {})}
        library_logging = bool(self._options["library_logging"])
        try:
            self._sio = self._client_factory(
                reconnection=self._options["reconnection"],
                reconnection_attempts=self._options["reconnection_attempts"],
                reconnection_delay=self._options["reconnection_delay"],
                logger=library_logging,
                engineio_logger=library_logging,
            )
        except (TypeError, ValueError) as e:
            raise TransportError(f"Could not create Socket.IO client: {e}") from e

        self._register_handlers()
        target = to_socketio_url(url)
        logger.info(f"Connecting to {target}")
        self._connect_task = asyncio.ensure_future(self._run_connect(target))

    async def _run_connect(self, url: str) -> None:
        try:
            await self._sio.connect(
                url,
                headers=self._options["headers"],
                transports=list(self._options["transports"]),
                wait_timeout=self._options["wait_timeout"],
                retry=self._options["retry_initial_connect"],
            )
        except socketio.exceptions.ConnectionError as e:
            logger.warning(f"Connection to {url} failed: {e}")
            if not self._error_reported and not self._closing:
                self._signal(TransportSignal.ERROR, str(e))
        except (ValueError, TypeError, OSError) as e:
            logger.error(f"Unexpected error connecting to {url}: {e}", exc_info=True)
            if not self._closing:
                self._signal(TransportSignal.ERROR, str(e))

    async def close(self) -> None:
        self._closing = True
        self._open = False
        task, self._connect_task = self._connect_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.debug("Pending connect cancelled")
        if self._sio is None:
            return
        try:
            await self._sio.shutdown()
        except (socketio.exceptions.SocketIOError, OSError, RuntimeError) as e:
            raise TransportError(f"Error closing connection: {e}") from e
        finally:
            self._handlers.clear()
            self._reconnecting = False

    # --- Events ---

    async def emit(self, event: str, payload: Any = None) -> None:
        if not self.connected:
            raise SendError(event, "socket is not connected")
        try:
            await self._sio.emit(event, payload)
        except (socketio.exceptions.SocketIOError, TypeError, ValueError) as e:
            raise SendError(event, str(e)) from e

    def on(self, event: str, handler: EventHandler) -> None:
        self._handlers[event] = handler

    def off(self, event: str) -> None:
        self._handlers.pop(event, None)

    def _dispatch(self, event: str, *args) -> None:
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug(f"No handler bound for '{event}', dropping")
            return
        if not args:
            data = None
        elif len(args) == 1:
            data = args[0]
        else:
            data = list(args)
        try:
            handler(data)
        except Exception:
            logger.exception(f"Handler for '{event}' failed")

    # --- python-socketio handlers ---

    def _register_handlers(self) -> None:
        # User handlers bound as connect/disconnect/connect_error are called
        # from these lifecycle handlers; everything else goes through "*".
        self._sio.on("connect", self._on_connect)
        self._sio.on("connect_error", self._on_connect_error)
        self._sio.on("disconnect", self._on_disconnect)
        # python-socketio fires this once it stops trying to reconnect
        self._sio.on("__disconnect_final", self._on_disconnect_final)
        self._sio.on("*", self._on_any_event)

    def _on_connect(self) -> None:
        logger.info(f"Connected with SID: {self.sid}")
        self._open = True
        self._error_reported = False
        if self._reconnecting:
            self._reconnecting = False
            self._signal(TransportSignal.RECONNECT_SUCCESS)
        else:
            self._signal(TransportSignal.OPEN)
        self._dispatch("connect")

    def _on_connect_error(self, data=None) -> None:
        logger.warning(f"Connection error: {data}")
        if self._reconnecting:
            self._signal(TransportSignal.RECONNECT_ERROR, data)
        else:
            self._error_reported = True
            self._signal(TransportSignal.ERROR, data)
        self._dispatch("connect_error", data)

    def _on_disconnect(self, reason=None) -> None:
        logger.info(f"Disconnected: {reason}")
        self._open = False
        self._dispatch("disconnect", reason)
        if self._closing or not self._will_reconnect(reason):
            self._signal(TransportSignal.CLOSE, reason)
        else:
            self._reconnecting = True
            self._signal(TransportSignal.RECONNECT_ATTEMPT, reason)

    def _on_disconnect_final(self) -> None:
        if self._reconnecting:
            logger.warning("Reconnection attempts exhausted")
            self._reconnecting = False
            self._signal(TransportSignal.CLOSE, "reconnection attempts exhausted")

    def _on_any_event(self, event: str, *args) -> None:
        self._dispatch(event, *args)
        if event == "error":
            self._signal(TransportSignal.ERROR, args[0] if len(args) == 1 else list(args))

    def _will_reconnect(self, reason) -> bool:
        if not self._options["reconnection"]:
            return False
        final_reasons = (
            self._sio.reason.CLIENT_DISCONNECT,
            self._sio.reason.SERVER_DISCONNECT,
        )
        return reason not in final_reasons
