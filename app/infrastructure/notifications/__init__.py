"""Realtime delivery helpers for the infrastructure layer."""

from .hub import InsertCallback, LiveUpdateHub, Unsubscribe, live_update_hub
from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    MessagePublisher,
    dispatch_message,
    message_publisher,
    serialize_message,
)
from .realtime import NEW_MESSAGE_EVENT, ParticipantNotifier, participant_notifier

__all__ = [
    "InsertCallback",
    "LiveUpdateHub",
    "Unsubscribe",
    "live_update_hub",
    "NotificationConnectionManager",
    "notification_manager",
    "MessagePublisher",
    "message_publisher",
    "dispatch_message",
    "serialize_message",
    "NEW_MESSAGE_EVENT",
    "ParticipantNotifier",
    "participant_notifier",
]
