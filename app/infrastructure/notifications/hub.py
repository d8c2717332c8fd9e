"""In-process fan-out of inserted messages to thread subscribers."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from typing import DefaultDict

from app.domain.entities import AnyMessage, ThreadKey

logger = logging.getLogger(__name__)

InsertCallback = Callable[[AnyMessage], None]
Unsubscribe = Callable[[], None]


class LiveUpdateHub:
    """Deliver every appended message to the callbacks subscribed to its thread.

    Delivery is at-least-once from the subscriber's point of view: a message
    may also show up in a concurrent ``list()`` snapshot, so subscribers must
    de-duplicate by message id. Callbacks run in the publisher's thread and
    must not block.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: DefaultDict[ThreadKey, dict[int, InsertCallback]] = defaultdict(dict)
        self._next_token = 0

    def subscribe(self, thread_key: ThreadKey, on_insert: InsertCallback) -> Unsubscribe:
        """Register ``on_insert`` for ``thread_key`` and return its ``unsubscribe``."""

        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[thread_key][token] = on_insert

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(thread_key)
                if callbacks is None:
                    return
                callbacks.pop(token, None)
                if not callbacks:
                    self._subscribers.pop(thread_key, None)

        return unsubscribe

    def publish(self, thread_key: ThreadKey, message: AnyMessage) -> int:
        """Invoke every subscriber of ``thread_key``; return how many were called."""

        with self._lock:
            callbacks = list(self._subscribers.get(thread_key, {}).values())

        for callback in callbacks:
            try:
                callback(message)
            except Exception:
                logger.exception(
                    "Subscriber of thread %s failed to handle message %s", thread_key, message.id
                )
        return len(callbacks)

    def subscriber_count(self, thread_key: ThreadKey) -> int:
        with self._lock:
            return len(self._subscribers.get(thread_key, {}))


live_update_hub = LiveUpdateHub()


__all__ = ["LiveUpdateHub", "InsertCallback", "Unsubscribe", "live_update_hub"]
