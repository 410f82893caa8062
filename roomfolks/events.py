"""Event record delivered by a transport and consumed by route handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

# Common Matrix event types
EVENT_MESSAGE = "m.room.message"
EVENT_MEMBER = "m.room.member"

# Message types carried in m.room.message content
MSGTYPE_TEXT = "m.text"
MSGTYPE_NOTICE = "m.notice"


@dataclass(frozen=True)
class Event:
    """A single notification received from the transport.

    ``room_id`` is empty for non-room events and ``id`` is empty for
    synthetic or ephemeral events. ``content`` is interpreted per type.
    """

    type: str
    sender: str
    room_id: str = ""
    id: str = ""
    content: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_room_event(self) -> bool:
        """True when the event belongs to a room and carries an event ID."""
        return bool(self.room_id and self.id)

    @property
    def msgtype(self) -> str | None:
        """``msgtype`` of a message event, if any."""
        value = self.content.get("msgtype")
        return value if isinstance(value, str) else None

    @property
    def body(self) -> str:
        """Text body of a message event (empty when absent)."""
        value = self.content.get("body")
        return value if isinstance(value, str) else ""

    @property
    def is_text_message(self) -> bool:
        return self.type == EVENT_MESSAGE and self.msgtype == MSGTYPE_TEXT


def text_message(sender: str, room_id: str, body: str, event_id: str = "") -> Event:
    """Build an ``m.room.message`` text event."""
    return Event(
        type=EVENT_MESSAGE,
        sender=sender,
        room_id=room_id,
        id=event_id,
        content={"msgtype": MSGTYPE_TEXT, "body": body},
    )


__all__ = [
    "Event",
    "text_message",
    "EVENT_MESSAGE",
    "EVENT_MEMBER",
    "MSGTYPE_TEXT",
    "MSGTYPE_NOTICE",
]
