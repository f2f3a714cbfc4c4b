"""Connection status values and the status transition table."""
import enum
from typing import Optional

from ..transport.base import TransportSignal


class ConnectionStatus(enum.Enum):
    """State of the single logical connection."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"
    RECONNECTING = "reconnecting"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def color_hex(self) -> str:
        """Colour hint for status indicators."""
        return _COLORS[self]


_DISPLAY_NAMES = {
    ConnectionStatus.DISCONNECTED: "Disconnected",
    ConnectionStatus.CONNECTING: "Connecting...",
    ConnectionStatus.CONNECTED: "Connected",
    ConnectionStatus.ERROR: "Error",
    ConnectionStatus.RECONNECTING: "Reconnecting...",
}

_COLORS = {
    ConnectionStatus.DISCONNECTED: "#757575",  # Grey
    ConnectionStatus.CONNECTING: "#FF9800",  # Orange
    ConnectionStatus.CONNECTED: "#4CAF50",  # Green
    ConnectionStatus.ERROR: "#F44336",  # Red
    ConnectionStatus.RECONNECTING: "#2196F3",  # Blue
}


# A generic error in these states leaves the status alone
ESTABLISHED = (ConnectionStatus.CONNECTED, ConnectionStatus.RECONNECTING)


def next_status(current: ConnectionStatus, signal: TransportSignal) -> Optional[ConnectionStatus]:
    """
    Resolve the status a transport signal leads to.

    Returns None when the signal leaves the status unchanged. An error after
    the connection is established (including while reconnecting) is ignored,
    and no signal ever causes an automatic disconnect.
    """
    if signal is TransportSignal.OPEN:
        return ConnectionStatus.CONNECTED
    if signal is TransportSignal.ERROR:
        if current in ESTABLISHED:
            return None
        return ConnectionStatus.ERROR
    if signal is TransportSignal.CLOSE:
        return ConnectionStatus.DISCONNECTED
    if signal in (TransportSignal.RECONNECT_ATTEMPT, TransportSignal.RECONNECT_ERROR):
        return ConnectionStatus.RECONNECTING
    if signal is TransportSignal.RECONNECT_SUCCESS:
        return ConnectionStatus.CONNECTED
    return None
