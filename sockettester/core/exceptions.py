"""
Exceptions raised by the Socket Tester core.

Controller operations catch these at their boundary and turn them into the
current-error value (plus a system message), so front ends normally only see
them through ``SocketTestController.error``.
"""

from typing import Optional, Dict, Any


class SocketTesterError(Exception):
    """Base exception for all Socket Tester errors"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(SocketTesterError):
    """Raised for malformed input such as an empty event name or a bad URL"""
    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.field = field
        super().__init__(message, details)


class DuplicateError(SocketTesterError):
    """Raised when a listener for the same event name already exists"""
    def __init__(self, event_name: str):
        self.event_name = event_name
        super().__init__(f'Event listener for "{event_name}" already exists')


class NotConnectedError(SocketTesterError):
    """Raised when an operation needs a live connection"""
    def __init__(self, message: str = "Not connected to WebSocket server"):
        super().__init__(message)


class SendError(SocketTesterError):
    """Raised when the transport rejects an emit"""
    def __init__(self, event_name: str, reason: str):
        self.event_name = event_name
        super().__init__(f"Failed to send '{event_name}': {reason}")


class TransportError(SocketTesterError):
    """Raised when connecting or tearing down the transport fails"""
    pass
