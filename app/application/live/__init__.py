"""Client-side view state kept in sync with the store."""

from .pollers import Inbox, InboxPoller, NotificationBadgePoller
from .polling import PeriodicRefresh
from .thread_session import ThreadSession
from .timeline import MessageTimeline

__all__ = [
    "Inbox",
    "InboxPoller",
    "NotificationBadgePoller",
    "PeriodicRefresh",
    "ThreadSession",
    "MessageTimeline",
]
