"""Domain entities for the derived notification feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class NotificationKind(str, Enum):
    MESSAGE = "message"
    UPCOMING_EVENT = "event"


@dataclass(frozen=True)
class NotificationItem:
    """Entry of the notification feed, synthesized on every build.

    ``visible_since`` is the moment the item entered the feed; the badge only
    counts items that became visible after the user's watermark.
    """

    id: str
    kind: NotificationKind
    title: str
    body: str
    timestamp: datetime
    link: str
    visible_since: datetime
    read: bool = False


@dataclass
class NotificationFeed:
    """Ordered notification items plus the badge count of the same source set."""

    items: list[NotificationItem] = field(default_factory=list)
    unread_count: int = 0

    @property
    def badge(self) -> str | None:
        if self.unread_count <= 0:
            return None
        return "9+" if self.unread_count > 9 else str(self.unread_count)


@dataclass
class NotificationWatermark:
    """Last time the user dismissed the notification panel."""

    user_id: str
    last_seen_at: datetime
    updated_at: datetime | None = None


__all__ = [
    "NotificationKind",
    "NotificationItem",
    "NotificationFeed",
    "NotificationWatermark",
]
