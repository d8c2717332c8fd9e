"""Utility helpers to push appended messages to live subscribers."""

from __future__ import annotations

from typing import Any, Iterable

from app.domain.entities import AnyMessage, DirectMessage

from .hub import LiveUpdateHub, live_update_hub
from .realtime import NEW_MESSAGE_EVENT, ParticipantNotifier, participant_notifier


class MessagePublisher:
    """Fan out a stored message to its thread and hint the other participants."""

    def __init__(self, hub: LiveUpdateHub, notifier: ParticipantNotifier) -> None:
        self._hub = hub
        self._notifier = notifier

    def dispatch(self, message: AnyMessage, participants: Iterable[str]) -> None:
        """Publish ``message`` to thread subscribers and to ``participants``."""

        self._hub.publish(message.thread_key, message)
        recipients = [user_id for user_id in participants if user_id != message.sender_id]
        self._notifier.notify(
            recipients,
            event_type=NEW_MESSAGE_EVENT,
            payload={"thread": str(message.thread_key), "message": serialize_message(message)},
        )


def serialize_message(message: AnyMessage) -> dict[str, Any]:
    """Return the websocket payload representation for ``message``."""

    payload: dict[str, Any] = {
        "id": message.id,
        "sender_id": message.sender_id,
        "body": message.body,
        "created_at": message.created_at.isoformat(),
    }
    if isinstance(message, DirectMessage):
        payload["thread_id"] = message.thread_id
    else:
        payload["event_id"] = message.event_id
    return payload


message_publisher = MessagePublisher(live_update_hub, participant_notifier)


def dispatch_message(message: AnyMessage, participants: Iterable[str]) -> None:
    """Public helper that delegates to the shared publisher instance."""

    message_publisher.dispatch(message, participants)


__all__ = [
    "MessagePublisher",
    "message_publisher",
    "dispatch_message",
    "serialize_message",
]
