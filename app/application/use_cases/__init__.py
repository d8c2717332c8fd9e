"""Aggregate application use cases."""

from .messaging import (
    list_messages,
    mark_thread_read,
    resolve_dm_thread,
    send_message,
)
from .notifications import advance_watermark, build_notification_feed

__all__ = [
    "list_messages",
    "mark_thread_read",
    "resolve_dm_thread",
    "send_message",
    "advance_watermark",
    "build_notification_feed",
]
