"""Append and read messages of event and direct threads."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import AnyMessage, ThreadKey
from app.domain.exceptions import EmptyMessageError, ThreadAccessDenied
from app.infrastructure.database import translate_store_errors
from app.infrastructure.notifications import dispatch_message

from .access import ensure_participant, message_repository_for, thread_participants


def normalize_body(body: str | None) -> str:
    """Return ``body`` without surrounding whitespace or raise :class:`EmptyMessageError`."""

    text = (body or "").strip()
    if not text:
        raise EmptyMessageError()
    return text


def send_message(
    session: Session,
    thread_key: ThreadKey,
    *,
    sender_id: str,
    body: str,
    created_at: datetime | None = None,
) -> AnyMessage:
    """Append ``body`` to ``thread_key`` and publish it to live subscribers."""

    text = normalize_body(body)
    participants = thread_participants(session, thread_key)
    if sender_id not in participants:
        raise ThreadAccessDenied(f"User {sender_id} does not participate in {thread_key}")

    repository = message_repository_for(session, thread_key.kind)
    with translate_store_errors(session, "messages.append"):
        message = repository.append(
            thread_key.id, sender_id=sender_id, body=text, created_at=created_at
        )

    dispatch_message(message, participants)
    return message


def list_messages(
    session: Session,
    thread_key: ThreadKey,
    *,
    user_id: str,
    since_id: int | None = None,
) -> list[AnyMessage]:
    """Return the messages of ``thread_key`` ordered by ``(created_at, id)``.

    With ``since_id`` only the messages after that one are returned. Reading
    never touches read-state.
    """

    ensure_participant(session, thread_key, user_id)
    repository = message_repository_for(session, thread_key.kind)
    with translate_store_errors(session, "messages.list"):
        return list(repository.list_for_thread(thread_key.id, since_id=since_id))


__all__ = ["normalize_body", "send_message", "list_messages"]
