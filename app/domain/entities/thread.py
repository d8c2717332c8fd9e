"""Domain entities describing conversation threads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ThreadKind(str, Enum):
    """Communication modes supported by the messaging core."""

    EVENT = "event"
    DM = "dm"


@dataclass(frozen=True)
class ThreadKey:
    """Canonical identity of a thread.

    Event threads are keyed by the event id; direct-message threads by the
    id of the ``dm_threads`` row shared by the two participants.
    """

    kind: ThreadKind
    id: int

    @classmethod
    def event(cls, event_id: int) -> "ThreadKey":
        return cls(ThreadKind.EVENT, int(event_id))

    @classmethod
    def dm(cls, thread_id: int) -> "ThreadKey":
        return cls(ThreadKind.DM, int(thread_id))

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


@dataclass(frozen=True)
class DMThread:
    """Direct-message thread between two users, stored with ``user_a < user_b``."""

    id: int
    user_a: str
    user_b: str
    created_at: datetime | None = None

    @property
    def key(self) -> ThreadKey:
        return ThreadKey.dm(self.id)

    def includes(self, user_id: str) -> bool:
        return user_id in (self.user_a, self.user_b)

    def other_participant(self, user_id: str) -> str:
        """Return the participant that is not ``user_id``."""

        if user_id == self.user_a:
            return self.user_b
        if user_id == self.user_b:
            return self.user_a
        raise ValueError(f"User {user_id} does not participate in thread {self.id}")


@dataclass
class EventThreadSummary:
    """Row of the thread list for an event conversation."""

    event_id: int
    title: str
    last_message_at: datetime | None
    last_message_body: str | None
    last_message_sender_id: str | None
    unread_count: int


@dataclass
class DMThreadSummary:
    """Row of the thread list for a direct conversation."""

    thread_id: int
    other_user_id: str
    other_display_name: str | None
    other_avatar_url: str | None
    last_message_at: datetime | None
    last_message_body: str | None
    last_message_sender_id: str | None
    unread_count: int


__all__ = [
    "ThreadKind",
    "ThreadKey",
    "DMThread",
    "EventThreadSummary",
    "DMThreadSummary",
]
