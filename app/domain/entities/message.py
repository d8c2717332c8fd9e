"""Domain entities for messages exchanged inside threads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .thread import ThreadKey


@dataclass(frozen=True)
class Message:
    """Immutable message posted to an event thread."""

    id: int
    event_id: int
    sender_id: str
    body: str
    created_at: datetime

    @property
    def thread_key(self) -> ThreadKey:
        return ThreadKey.event(self.event_id)

    def sort_key(self) -> tuple[datetime, int]:
        return (self.created_at, self.id)


@dataclass(frozen=True)
class DirectMessage:
    """Immutable message posted to a direct-message thread."""

    id: int
    thread_id: int
    sender_id: str
    body: str
    created_at: datetime

    @property
    def thread_key(self) -> ThreadKey:
        return ThreadKey.dm(self.thread_id)

    def sort_key(self) -> tuple[datetime, int]:
        return (self.created_at, self.id)


AnyMessage = Message | DirectMessage


@dataclass(frozen=True)
class ReadMarker:
    """Presence of a marker for ``(message_id, user_id)`` means the user read it."""

    message_id: int
    user_id: str
    read_at: datetime | None


__all__ = ["Message", "DirectMessage", "AnyMessage", "ReadMarker"]
