"""Registry of the notification websockets each user keeps open."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track the notification sockets of every user.

    A user may have several tabs open; hints go to all of them, and a socket
    that fails to receive one is forgotten.
    """

    def __init__(self) -> None:
        self._sockets: dict[str, list[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        sockets = self._sockets.setdefault(user_id, [])
        if websocket not in sockets:
            sockets.append(websocket)
        logger.debug("User %s has %s notification socket(s) open", user_id, len(sockets))

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        remaining = [socket for socket in self._sockets.get(user_id, []) if socket is not websocket]
        if remaining:
            self._sockets[user_id] = remaining
        else:
            self._sockets.pop(user_id, None)

    def is_connected(self, user_id: str) -> bool:
        return user_id in self._sockets

    def connection_count(self, user_id: str) -> int:
        return len(self._sockets.get(user_id, ()))

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every socket of ``user_id``; return how many received it."""

        delivered = 0
        for websocket in tuple(self._sockets.get(user_id, ())):
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                logger.info("Forgetting notification socket of %s: %s", user_id, exc)
                self.disconnect(user_id, websocket)
            else:
                delivered += 1
        return delivered


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
