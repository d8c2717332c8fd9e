"""Repository implementations for infrastructure layer."""

from .dm_thread_repository import DMThreadRepository
from .event_repository import EventRepository
from .message_repository import DirectMessageRepository, MessageRepository
from .notification_state_repository import NotificationStateRepository
from .profile_repository import ProfileRepository
from .read_marker_repository import ReadMarkerRepository

__all__ = [
    "DMThreadRepository",
    "DirectMessageRepository",
    "EventRepository",
    "MessageRepository",
    "NotificationStateRepository",
    "ProfileRepository",
    "ReadMarkerRepository",
]
