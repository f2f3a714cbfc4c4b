"""Socket Tester

A small application for manually exercising Socket.IO servers: connect to a URL,
register named event listeners, send events with JSON-or-text payloads and
watch a timestamped message log.

The networking itself is handled by python-socketio. This package keeps the
connection status, the listener registry and the message log, and exposes them
as observable state to whatever front end drives it (see ``sockettester.cli``).
"""

__version__ = "0.3.0"
