"""Domain entities exposed by the application."""

from .event import (
    APPLICATION_STATUS_ACCEPTED,
    APPLICATION_STATUS_PENDING,
    APPLICATION_STATUS_REJECTED,
    AcceptedSlot,
    Event,
    EventSlot,
)
from .message import AnyMessage, DirectMessage, Message, ReadMarker
from .notification import (
    NotificationFeed,
    NotificationItem,
    NotificationKind,
    NotificationWatermark,
)
from .profile import Profile
from .thread import DMThread, DMThreadSummary, EventThreadSummary, ThreadKey, ThreadKind
from .timeline import DeliveryState, TimelineEntry

__all__ = [
    "APPLICATION_STATUS_ACCEPTED",
    "APPLICATION_STATUS_PENDING",
    "APPLICATION_STATUS_REJECTED",
    "AcceptedSlot",
    "Event",
    "EventSlot",
    "AnyMessage",
    "DirectMessage",
    "Message",
    "ReadMarker",
    "NotificationFeed",
    "NotificationItem",
    "NotificationKind",
    "NotificationWatermark",
    "Profile",
    "DMThread",
    "DMThreadSummary",
    "EventThreadSummary",
    "ThreadKey",
    "ThreadKind",
    "DeliveryState",
    "TimelineEntry",
]
