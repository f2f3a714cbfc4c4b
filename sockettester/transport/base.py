"""Transport boundary for Socket Tester.

The core only talks to a transport through this interface, so any
Socket.IO-compatible client can sit behind it. Lifecycle changes come back
through a single signal handler instead of named events.
"""
import enum
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class TransportSignal(enum.Enum):
    """Lifecycle signals reported by a transport."""
    OPEN = "open"
    ERROR = "error"
    CLOSE = "close"
    RECONNECT_ATTEMPT = "reconnect_attempt"
    RECONNECT_ERROR = "reconnect_error"
    RECONNECT_SUCCESS = "reconnect_success"


SignalHandler = Callable[[TransportSignal, Any], None]
EventHandler = Callable[..., None]


class Transport(ABC):
    """A single Socket.IO client connection."""

    def __init__(self):
        self._signal_handler: Optional[SignalHandler] = None

    def set_signal_handler(self, handler: Optional[SignalHandler]) -> None:
        self._signal_handler = handler

    def _signal(self, signal: TransportSignal, detail: Any = None) -> None:
        logger.debug(f"Transport signal {signal.value}: {detail}")
        if self._signal_handler is not None:
            self._signal_handler(signal, detail)

    @property
    @abstractmethod
    def connected(self) -> bool:
        ...

    @abstractmethod
    async def open(self, url: str, options: Optional[Dict[str, Any]] = None) -> None:
        """Start connecting; returns once the attempt has been issued.

        Raises:
            TransportError: If the attempt cannot be started at all.
        """

    @abstractmethod
    async def close(self) -> None:
        """Tear the connection down. Safe to call more than once."""

    @abstractmethod
    async def emit(self, event: str, payload: Any = None) -> None:
        """Send an event.

        Raises:
            SendError: If the transport rejects it.
        """

    @abstractmethod
    def on(self, event: str, handler: EventHandler) -> None:
        """Bind a handler for an event, replacing any existing one."""

    @abstractmethod
    def off(self, event: str) -> None:
        """Remove the handler for an event, if any."""
