"""Transport package for Socket Tester.

Components:
- base: the Transport interface the core depends on
- socketio_transport: implementation over python-socketio's AsyncClient
"""

from .base import Transport
from .socketio_transport import SocketIOTransport

__all__ = [
    'Transport',
    'SocketIOTransport',
]
