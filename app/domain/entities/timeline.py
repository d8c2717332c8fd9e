"""Entries of the in-memory message timeline shown for an open thread."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from .message import AnyMessage


class DeliveryState(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class TimelineEntry:
    """A message as displayed: optimistic, confirmed by the store, or failed.

    State changes produce a new entry instead of mutating the existing one.
    """

    state: DeliveryState
    sender_id: str
    body: str
    created_at: datetime
    client_id: str | None = None
    message_id: int | None = None
    error: str | None = None

    @classmethod
    def pending(
        cls, *, client_id: str, sender_id: str, body: str, created_at: datetime
    ) -> "TimelineEntry":
        return cls(
            state=DeliveryState.PENDING,
            sender_id=sender_id,
            body=body,
            created_at=created_at,
            client_id=client_id,
        )

    @classmethod
    def confirmed(cls, message: AnyMessage, *, client_id: str | None = None) -> "TimelineEntry":
        return cls(
            state=DeliveryState.CONFIRMED,
            sender_id=message.sender_id,
            body=message.body,
            created_at=message.created_at,
            client_id=client_id,
            message_id=message.id,
        )

    def failed(self, error: str) -> "TimelineEntry":
        return replace(self, state=DeliveryState.FAILED, error=error)

    def retried(self) -> "TimelineEntry":
        return replace(self, state=DeliveryState.PENDING, error=None)


__all__ = ["DeliveryState", "TimelineEntry"]
