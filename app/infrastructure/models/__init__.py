"""ORM models used by the application infrastructure."""

from .direct_message import DMMessageModel, DMReadModel, DMThreadModel
from .event import ApplicationModel, EventModel, EventSlotModel
from .message import MessageModel, MessageReadModel
from .notification_state import NotificationStateModel
from .profile import ProfileModel

__all__ = [
    "ApplicationModel",
    "DMMessageModel",
    "DMReadModel",
    "DMThreadModel",
    "EventModel",
    "EventSlotModel",
    "MessageModel",
    "MessageReadModel",
    "NotificationStateModel",
    "ProfileModel",
]
