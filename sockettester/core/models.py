"""Records kept by Socket Tester.

This module defines the immutable records shared by the message log, the
listener registry and front ends: message payloads, log messages and event
listener definitions. Messages and listeners serialize to camelCase
dictionaries with timestamps in epoch milliseconds.
"""
import json
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Union

SYSTEM_EVENT = "system"


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid.uuid4().hex


def _to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _from_millis(value: Optional[int]) -> datetime:
    if value is None:
        return datetime.now()
    return datetime.fromtimestamp(value / 1000)


# --- Payloads ---

@dataclass(frozen=True)
class StructuredPayload:
    """Parsed JSON value (object, array, number, string, bool or null)."""
    value: Any


@dataclass(frozen=True)
class TextPayload:
    """Opaque text that was not valid JSON."""
    text: str


Payload = Union[StructuredPayload, TextPayload]


def parse_payload(raw: str) -> Payload:
    """Parse text as JSON, falling back to the text itself.

    The fallback is never an error: ``hello`` becomes a text payload while
    ``{"a": 1}`` becomes a structured one.
    """
    try:
        return StructuredPayload(json.loads(raw))
    except (ValueError, TypeError):
        return TextPayload(raw)


def payload_from_wire(data: Any) -> Payload:
    """Build a payload for data received from the transport."""
    if isinstance(data, str):
        return parse_payload(data)
    if isinstance(data, (bytes, bytearray)):
        try:
            return parse_payload(data.decode("utf-8"))
        except UnicodeDecodeError:
            return TextPayload(repr(bytes(data)))
    return StructuredPayload(data)


def payload_to_wire(payload: Payload) -> Any:
    """Get the value to hand to the transport's emit."""
    if isinstance(payload, StructuredPayload):
        return payload.value
    return payload.text


def payload_to_json(payload: Payload) -> Dict[str, Any]:
    if isinstance(payload, TextPayload):
        return {"kind": "text", "value": payload.text}
    return {"kind": "structured", "value": payload.value}


def payload_from_json(data: Any) -> Payload:
    """Inverse of ``payload_to_json``; bare values are treated as structured."""
    if isinstance(data, dict) and set(data) == {"kind", "value"}:
        if data["kind"] == "text":
            return TextPayload(str(data["value"]))
        return StructuredPayload(data["value"])
    if isinstance(data, str):
        return TextPayload(data)
    return StructuredPayload(data)


# --- Messages ---

@dataclass(frozen=True)
class Message:
    """One entry of the message log (sent, received or system)."""
    event: str
    data: Payload
    is_outgoing: bool = False
    error: Optional[str] = None
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(event=SYSTEM_EVENT, data=TextPayload(text))

    @property
    def is_system(self) -> bool:
        return self.event == SYSTEM_EVENT

    @property
    def formatted_timestamp(self) -> str:
        return self.timestamp.strftime("%H:%M:%S")

    @property
    def formatted_data(self) -> str:
        """Payload rendered for display."""
        if isinstance(self.data, TextPayload):
            return self.data.text
        try:
            return json.dumps(self.data.value, ensure_ascii=False)
        except (TypeError, ValueError):
            return str(self.data.value)

    @property
    def direction(self) -> str:
        if self.is_system:
            return "system"
        return "outgoing" if self.is_outgoing else "incoming"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "event": self.event,
            "data": payload_to_json(self.data),
            "timestamp": _to_millis(self.timestamp),
            "isOutgoing": self.is_outgoing,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            id=data.get("id") or new_id(),
            event=data.get("event") or "unknown",
            data=payload_from_json(data.get("data")),
            timestamp=_from_millis(data.get("timestamp")),
            is_outgoing=bool(data.get("isOutgoing", False)),
            error=data.get("error"),
        )


# --- Event listeners ---

@dataclass(frozen=True)
class EventListener:
    """A named subscription kept by the listener registry."""
    event_name: str
    is_active: bool = True
    description: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def with_active(self, is_active: bool) -> "EventListener":
        return replace(self, is_active=is_active)

    @property
    def display_name(self) -> str:
        status = "🟢" if self.is_active else "🔴"
        return f"{status} {self.event_name}"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "eventName": self.event_name,
            "isActive": self.is_active,
            "createdAt": _to_millis(self.created_at),
        }
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EventListener":
        return cls(
            id=data.get("id") or new_id(),
            event_name=data.get("eventName", ""),
            is_active=bool(data.get("isActive", True)),
            created_at=_from_millis(data.get("createdAt")),
            description=data.get("description"),
        )
