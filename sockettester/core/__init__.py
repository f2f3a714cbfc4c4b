"""Core functionality for Socket Tester.

Components:
- SocketTestController: connection lifecycle and the only mutation surface
- ListenerRegistry: named event listeners and their live bindings
- MessageLog: append-only log of sent, received and system messages
- ConnectionStatus: the connection state machine
"""

from .connection_status import ConnectionStatus, TransportSignal, next_status
from .controller import SocketTestController
from .exceptions import (
    SocketTesterError, ValidationError, DuplicateError, NotConnectedError,
    SendError, TransportError
)
from .listener_registry import ListenerRegistry
from .message_log import MessageLog
from .models import EventListener, Message, StructuredPayload, TextPayload

__all__ = [
    'SocketTestController',
    'ListenerRegistry',
    'MessageLog',
    'ConnectionStatus',
    'TransportSignal',
    'next_status',
    'EventListener',
    'Message',
    'StructuredPayload',
    'TextPayload',
    'SocketTesterError',
    'ValidationError',
    'DuplicateError',
    'NotConnectedError',
    'SendError',
    'TransportError',
]
