"""Push new-message hints to the notification sockets of participants."""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Iterable

from anyio import from_thread

from .manager import NotificationConnectionManager, notification_manager

logger = logging.getLogger(__name__)

NEW_MESSAGE_EVENT = "messages.new"


class ParticipantNotifier:
    """Send hints so open notification panels refresh before the next poll.

    Hints are best effort: users without an open socket are skipped, and a
    hint raised outside any reachable event loop is dropped with a warning.
    The badge poller remains the source of truth.
    """

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    def notify(
        self, recipients: Iterable[str], *, event_type: str, payload: dict[str, Any]
    ) -> int:
        """Schedule ``event_type`` for every connected recipient; return how many."""

        connected = sorted(
            {user_id for user_id in recipients if user_id and self._manager.is_connected(user_id)}
        )
        for user_id in connected:
            self._schedule(user_id, {"type": event_type, "data": copy.deepcopy(payload)})
        return len(connected)

    def _schedule(self, user_id: str, message: dict[str, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            loop.create_task(self._manager.send_to_user(user_id, message))
            return

        # Sync route handlers run in anyio worker threads.
        try:
            from_thread.run(self._manager.send_to_user, user_id, message)
        except RuntimeError:
            logger.warning("Hint for user %s dropped: no event loop reachable", user_id)


participant_notifier = ParticipantNotifier(notification_manager)


__all__ = ["NEW_MESSAGE_EVENT", "ParticipantNotifier", "participant_notifier"]
