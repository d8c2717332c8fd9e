"""Errors raised by the messaging and notification core."""

from __future__ import annotations


class MessagingError(Exception):
    """Base class for messaging domain errors."""


class EmptyMessageError(MessagingError, ValueError):
    """The message body is empty once surrounding whitespace is removed."""

    def __init__(self) -> None:
        super().__init__("Message body must not be empty")


class ThreadNotFound(MessagingError, LookupError):
    """The requested thread does not exist."""


class ThreadAccessDenied(MessagingError, PermissionError):
    """The user does not participate in the requested thread."""


class ThreadCreationConflict(MessagingError):
    """A direct-message thread could not be created nor re-fetched."""


class StoreUnavailable(MessagingError):
    """The persistent store could not be reached or rejected the operation."""


class ReadMarkerWriteFailure(MessagingError):
    """Read markers could not be written; unread counts may be stale."""


class RowDecodeError(MessagingError, ValueError):
    """A store row is missing fields required by its domain entity."""


__all__ = [
    "MessagingError",
    "EmptyMessageError",
    "ThreadNotFound",
    "ThreadAccessDenied",
    "ThreadCreationConflict",
    "StoreUnavailable",
    "ReadMarkerWriteFailure",
    "RowDecodeError",
]
