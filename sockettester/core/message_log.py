"""Message log for Socket Tester.

Append-only, time-ordered record of sent, received and system messages. The
log is the only owner of the sequence; the controller and the listener
registry add to it through ``append`` (or the helpers that build a message and
append it in one locked step, so timestamps follow append order).
"""
import logging
import threading
from collections import deque
from typing import Any, Callable, Iterator, List, Optional

from .events import EventStream, LogCleared, MessageAppended, Unsubscribe
from .models import Message, Payload, payload_from_wire

logger = logging.getLogger(__name__)

CLEARED_TEXT = "Message history cleared"


class MessageLog:
    """Thread-safe, unbounded message log."""

    def __init__(self, stream: Optional[EventStream] = None):
        self.stream = stream or EventStream()
        self.buffer = deque()
        self.lock = threading.RLock()

    def append(self, message: Message) -> Message:
        """Add a message to the end of the log."""
        with self.lock:
            self.buffer.append(message)
        self.stream.publish(MessageAppended(message))
        return message

    def system(self, text: str) -> Message:
        """Append a system notice."""
        logger.info(text)
        with self.lock:
            return self.append(Message.system(text))

    def inbound(self, event: str, data: Any) -> Message:
        """Append a message received from the server."""
        payload = payload_from_wire(data)
        with self.lock:
            return self.append(Message(event=event, data=payload, is_outgoing=False))

    def outbound(self, event: str, payload: Payload) -> Message:
        """Append a message that was sent to the server."""
        with self.lock:
            return self.append(Message(event=event, data=payload, is_outgoing=True))

    def clear(self) -> Message:
        """Empty the log, leaving a single system message that records it.

        Appends from other threads wait until the notice is in place.
        """
        with self.lock:
            self.buffer.clear()
            self.stream.publish(LogCleared())
            return self.system(CLEARED_TEXT)

    @property
    def messages(self) -> List[Message]:
        """Snapshot of all messages, oldest first."""
        with self.lock:
            return list(self.buffer)

    @property
    def last(self) -> Optional[Message]:
        with self.lock:
            return self.buffer[-1] if self.buffer else None

    def subscribe(self, callback: Callable[[Optional[Message]], None]) -> Unsubscribe:
        """Call ``callback(message)`` on every append and ``callback(None)`` on clear."""
        def forward(event):
            callback(event.message if isinstance(event, MessageAppended) else None)
        return self.stream.subscribe(forward, MessageAppended, LogCleared)

    def __len__(self) -> int:
        with self.lock:
            return len(self.buffer)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)
