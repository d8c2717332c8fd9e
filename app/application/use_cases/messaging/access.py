"""Participant checks shared by the messaging use cases."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import ThreadKey, ThreadKind
from app.domain.exceptions import ThreadAccessDenied, ThreadNotFound
from app.infrastructure.database import translate_store_errors
from app.infrastructure.repositories import (
    DMThreadRepository,
    DirectMessageRepository,
    EventRepository,
    MessageRepository,
)


def message_repository_for(
    session: Session, kind: ThreadKind
) -> MessageRepository | DirectMessageRepository:
    if kind is ThreadKind.EVENT:
        return MessageRepository(session)
    return DirectMessageRepository(session)


def thread_participants(session: Session, thread_key: ThreadKey) -> set[str]:
    """Return the users allowed to read and write ``thread_key``.

    Event threads belong to the organizer and every applicant; DM threads to
    their two members.
    """

    with translate_store_errors(session, "threads.participants"):
        if thread_key.kind is ThreadKind.EVENT:
            if EventRepository(session).get(thread_key.id) is None:
                raise ThreadNotFound(f"Event {thread_key.id} not found")
            return EventRepository(session).participant_ids(thread_key.id)

        thread = DMThreadRepository(session).get(thread_key.id)
        if thread is None:
            raise ThreadNotFound(f"Direct thread {thread_key.id} not found")
        return {thread.user_a, thread.user_b}


def ensure_participant(session: Session, thread_key: ThreadKey, user_id: str) -> set[str]:
    """Raise :class:`ThreadAccessDenied` unless ``user_id`` takes part in the thread."""

    participants = thread_participants(session, thread_key)
    if user_id not in participants:
        raise ThreadAccessDenied(f"User {user_id} does not participate in {thread_key}")
    return participants


__all__ = ["message_repository_for", "thread_participants", "ensure_participant"]
