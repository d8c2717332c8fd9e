"""Thread identity resolution and thread listings."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import DMThread, DMThreadSummary, EventThreadSummary
from app.domain.exceptions import ThreadAccessDenied, ThreadCreationConflict, ThreadNotFound
from app.infrastructure.database import translate_store_errors
from app.infrastructure.repositories import (
    DMThreadRepository,
    DirectMessageRepository,
    EventRepository,
    MessageRepository,
    ProfileRepository,
)

logger = logging.getLogger(__name__)

_NO_MESSAGES = datetime.min.replace(tzinfo=timezone.utc)


def canonical_pair(first_user_id: str, second_user_id: str) -> tuple[str, str]:
    """Return the two user ids ordered lexicographically."""

    first = (first_user_id or "").strip()
    second = (second_user_id or "").strip()
    if not first or not second:
        raise ValueError("Both participants are required")
    if first == second:
        raise ValueError("A conversation needs two different users")
    return (first, second) if first < second else (second, first)


def resolve_dm_thread(session: Session, current_user_id: str, other_user_id: str) -> DMThread:
    """Return the DM thread shared by the two users, creating it on first contact.

    When a concurrent request inserts the same pair first, the unique
    constraint rejects this insert and the winner's row is fetched instead.
    """

    user_a, user_b = canonical_pair(current_user_id, other_user_id)
    repository = DMThreadRepository(session)

    with translate_store_errors(session, "dm_threads.lookup"):
        existing = repository.get_by_pair(user_a, user_b)
    if existing is not None:
        return existing

    try:
        created = repository.create(user_a, user_b)
    except IntegrityError:
        logger.info("DM thread for %s/%s created concurrently; fetching it", user_a, user_b)
    except SQLAlchemyError as exc:
        raise ThreadCreationConflict(
            f"Could not create the thread between {user_a} and {user_b}"
        ) from exc
    else:
        logger.info("Created DM thread %s for %s/%s", created.id, user_a, user_b)
        return created

    with translate_store_errors(session, "dm_threads.lookup"):
        existing = repository.get_by_pair(user_a, user_b)
    if existing is None:
        raise ThreadCreationConflict(
            f"Thread between {user_a} and {user_b} was neither created nor found"
        )
    return existing


def get_dm_thread(session: Session, thread_id: int, *, user_id: str) -> DMThread:
    """Return the DM thread ``thread_id`` after checking ``user_id`` belongs to it."""

    with translate_store_errors(session, "dm_threads.get"):
        thread = DMThreadRepository(session).get(thread_id)
    if thread is None:
        raise ThreadNotFound(f"Direct thread {thread_id} not found")
    if not thread.includes(user_id):
        raise ThreadAccessDenied(f"User {user_id} does not participate in thread {thread_id}")
    return thread


def list_event_threads(session: Session, user_id: str) -> list[EventThreadSummary]:
    """Return the event conversations of ``user_id``, most recently active first."""

    with translate_store_errors(session, "threads.events"):
        event_repository = EventRepository(session)
        event_ids = event_repository.event_ids_for_user(user_id)
        events = event_repository.get_map_by_ids(event_ids)
        message_repository = MessageRepository(session)
        last_messages = message_repository.last_messages(event_ids)
        unread = message_repository.unread_counts(event_ids, user_id)

    summaries: list[EventThreadSummary] = []
    for event_id in event_ids:
        event = events.get(event_id)
        if event is None:
            continue
        last = last_messages.get(event_id)
        summaries.append(
            EventThreadSummary(
                event_id=event_id,
                title=event.title,
                last_message_at=last.created_at if last else None,
                last_message_body=last.body if last else None,
                last_message_sender_id=last.sender_id if last else None,
                unread_count=unread.get(event_id, 0),
            )
        )
    summaries.sort(key=lambda s: (s.last_message_at or _NO_MESSAGES, s.event_id), reverse=True)
    return summaries


def list_dm_threads(session: Session, user_id: str) -> list[DMThreadSummary]:
    """Return the direct conversations of ``user_id``, most recently active first."""

    with translate_store_errors(session, "threads.direct"):
        threads = DMThreadRepository(session).list_for_user(user_id)
        thread_ids = [thread.id for thread in threads]
        message_repository = DirectMessageRepository(session)
        last_messages = message_repository.last_messages(thread_ids)
        unread = message_repository.unread_counts(thread_ids, user_id)
        profiles = ProfileRepository(session).get_map_by_ids(
            thread.other_participant(user_id) for thread in threads
        )

    summaries: list[DMThreadSummary] = []
    for thread in threads:
        other_id = thread.other_participant(user_id)
        profile = profiles.get(other_id)
        last = last_messages.get(thread.id)
        summaries.append(
            DMThreadSummary(
                thread_id=thread.id,
                other_user_id=other_id,
                other_display_name=profile.display_name if profile else None,
                other_avatar_url=profile.avatar_url if profile else None,
                last_message_at=last.created_at if last else None,
                last_message_body=last.body if last else None,
                last_message_sender_id=last.sender_id if last else None,
                unread_count=unread.get(thread.id, 0),
            )
        )
    summaries.sort(key=lambda s: (s.last_message_at or _NO_MESSAGES, s.thread_id), reverse=True)
    return summaries


__all__ = [
    "canonical_pair",
    "resolve_dm_thread",
    "get_dm_thread",
    "list_event_threads",
    "list_dm_threads",
]
