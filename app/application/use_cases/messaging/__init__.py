"""Use cases for event and direct conversations."""

from .access import ensure_participant, thread_participants
from .messages import list_messages, normalize_body, send_message
from .read_state import mark_read, mark_thread_read, unread_count
from .threads import (
    canonical_pair,
    get_dm_thread,
    list_dm_threads,
    list_event_threads,
    resolve_dm_thread,
)

__all__ = [
    "ensure_participant",
    "thread_participants",
    "list_messages",
    "normalize_body",
    "send_message",
    "mark_read",
    "mark_thread_read",
    "unread_count",
    "canonical_pair",
    "get_dm_thread",
    "list_dm_threads",
    "list_event_threads",
    "resolve_dm_thread",
]
