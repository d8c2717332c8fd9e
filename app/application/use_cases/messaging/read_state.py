"""Per-user read markers and unread counts."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import ThreadKey, ThreadKind
from app.domain.exceptions import ReadMarkerWriteFailure
from app.infrastructure.database import translate_store_errors
from app.infrastructure.repositories import ReadMarkerRepository

from .access import ensure_participant, message_repository_for

logger = logging.getLogger(__name__)


def mark_read(
    session: Session,
    kind: ThreadKind,
    message_ids: Iterable[int],
    user_id: str,
    *,
    read_at: datetime | None = None,
) -> int:
    """Mark ``message_ids`` as read by ``user_id``; return how many markers were created.

    Self-authored and already-read messages are skipped, so repeating the call
    is harmless.
    """

    try:
        return ReadMarkerRepository(session, kind).insert_missing(
            message_ids, user_id, read_at=read_at
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise ReadMarkerWriteFailure(f"Could not store read markers for {user_id}") from exc


def mark_thread_read(session: Session, thread_key: ThreadKey, user_id: str) -> int:
    """Mark every message of ``thread_key`` sent by others as read by ``user_id``."""

    ensure_participant(session, thread_key, user_id)
    repository = message_repository_for(session, thread_key.kind)
    try:
        message_ids = repository.list_ids_from_others(thread_key.id, user_id)
    except SQLAlchemyError as exc:
        session.rollback()
        raise ReadMarkerWriteFailure(f"Could not list unread messages of {thread_key}") from exc
    marked = mark_read(session, thread_key.kind, message_ids, user_id)
    if marked:
        logger.debug("Marked %s messages of %s as read by %s", marked, thread_key, user_id)
    return marked


def unread_count(session: Session, thread_key: ThreadKey, user_id: str) -> int:
    """Count messages of ``thread_key`` sent by others and not read by ``user_id``."""

    repository = message_repository_for(session, thread_key.kind)
    with translate_store_errors(session, "messages.unread_count"):
        return repository.count_unread(thread_key.id, user_id)


__all__ = ["mark_read", "mark_thread_read", "unread_count"]
