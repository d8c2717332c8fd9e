"""Domain entities for Outs, their slots and applications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

APPLICATION_STATUS_PENDING = "pendente"
APPLICATION_STATUS_ACCEPTED = "aceito"
APPLICATION_STATUS_REJECTED = "recusado"


@dataclass
class Event:
    """Activity invitation ("Out") organized by ``author_id``."""

    id: int
    author_id: str
    title: str
    created_at: datetime | None = None


@dataclass
class EventSlot:
    """Concrete date and time window offered by an event."""

    id: int
    event_id: int
    date: date
    start_time: time
    end_time: time


@dataclass
class AcceptedSlot:
    """Slot of an event the user was accepted into."""

    event_id: int
    event_title: str
    slot: EventSlot


__all__ = [
    "APPLICATION_STATUS_PENDING",
    "APPLICATION_STATUS_ACCEPTED",
    "APPLICATION_STATUS_REJECTED",
    "Event",
    "EventSlot",
    "AcceptedSlot",
]
