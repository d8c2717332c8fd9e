"""Tests for appending and listing thread messages."""

from __future__ import annotations

from datetime import timedelta

import pytest

from app.application.use_cases.messaging import list_messages, resolve_dm_thread, send_message
from app.domain.entities import APPLICATION_STATUS_PENDING, ThreadKey
from app.domain.exceptions import (
    EmptyMessageError,
    ThreadAccessDenied,
    ThreadNotFound,
)
from app.infrastructure.notifications import live_update_hub
from app.infrastructure.repositories import MessageRepository


def test_messages_are_ordered_by_creation_then_id(session, seed, now) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    later = seed.message(event_id, "ana", "segunda", now)
    earlier = seed.message(event_id, "org", "primeira", now - timedelta(minutes=5))
    tie = seed.message(event_id, "org", "terceira", now)

    messages = list_messages(session, ThreadKey.event(event_id), user_id="ana")

    assert [message.id for message in messages] == [earlier, later, tie]


def test_since_id_returns_only_newer_messages(session, seed, now) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    first = seed.message(event_id, "org", "um", now - timedelta(minutes=2))
    second = seed.message(event_id, "ana", "dois", now - timedelta(minutes=1))
    third = seed.message(event_id, "org", "três", now)

    newer = list_messages(session, ThreadKey.event(event_id), user_id="org", since_id=first)
    latest = list_messages(session, ThreadKey.event(event_id), user_id="org", since_id=third)

    assert [message.id for message in newer] == [second, third]
    assert latest == []


def test_unknown_since_id_falls_back_to_id_comparison(session, seed, now) -> None:
    event_id = seed.event("org")
    first = seed.message(event_id, "org", "um", now)
    second = seed.message(event_id, "org", "dois", now)

    messages = list_messages(
        session, ThreadKey.event(event_id), user_id="org", since_id=first + 100
    )
    assert messages == []
    messages = list_messages(session, ThreadKey.event(event_id), user_id="org", since_id=0)
    assert [message.id for message in messages] == [first, second]


def test_send_trims_body_and_persists_message(session, seed) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})

    message = send_message(
        session, ThreadKey.event(event_id), sender_id="ana", body="  bora?  "
    )

    assert message.body == "bora?"
    assert message.event_id == event_id
    stored = MessageRepository(session).get(message.id)
    assert stored == message


@pytest.mark.parametrize("body", ["", "   ", "\n\t"])
def test_send_rejects_empty_body_without_touching_store(session, seed, body: str) -> None:
    event_id = seed.event("org")

    with pytest.raises(EmptyMessageError):
        send_message(session, ThreadKey.event(event_id), sender_id="org", body=body)

    assert MessageRepository(session).list_for_thread(event_id) == []


def test_send_requires_participation(session, seed) -> None:
    event_id = seed.event("org")

    with pytest.raises(ThreadAccessDenied):
        send_message(session, ThreadKey.event(event_id), sender_id="intruso", body="oi")
    with pytest.raises(ThreadNotFound):
        send_message(session, ThreadKey.event(event_id + 1), sender_id="org", body="oi")


def test_list_requires_participation(session, seed) -> None:
    thread = resolve_dm_thread(session, "ana", "bruna")

    with pytest.raises(ThreadAccessDenied):
        list_messages(session, thread.key, user_id="carla")


def test_send_publishes_to_thread_subscribers(session) -> None:
    thread = resolve_dm_thread(session, "ana", "bruna")
    received = []
    unsubscribe = live_update_hub.subscribe(thread.key, received.append)
    try:
        message = send_message(session, thread.key, sender_id="ana", body="oi")
    finally:
        unsubscribe()

    assert received == [message]
    assert live_update_hub.subscriber_count(thread.key) == 0
