"""Tests for the in-memory timeline of an open thread."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.application.live import MessageTimeline
from app.domain.entities import DeliveryState, DirectMessage, Message, ThreadKey

BASE = datetime(2024, 5, 10, 18, 0, tzinfo=timezone.utc)


def _message(message_id: int, *, minutes: int = 0, sender_id: str = "org") -> Message:
    return Message(
        id=message_id,
        event_id=7,
        sender_id=sender_id,
        body=f"mensagem {message_id}",
        created_at=BASE + timedelta(minutes=minutes),
    )


def test_live_push_and_snapshot_do_not_duplicate() -> None:
    timeline = MessageTimeline(ThreadKey.event(7))
    timeline.replace_snapshot([_message(1), _message(2, minutes=1)])

    assert timeline.merge(_message(2, minutes=1)) is False
    assert timeline.merge(_message(3, minutes=2)) is True
    timeline.replace_snapshot([_message(1), _message(2, minutes=1), _message(3, minutes=2)])

    assert timeline.message_ids() == [1, 2, 3]
    assert timeline.last_message_id == 3


def test_snapshot_keeps_newer_pushed_messages() -> None:
    timeline = MessageTimeline(ThreadKey.event(7))
    timeline.merge(_message(5, minutes=5))

    timeline.replace_snapshot([_message(1), _message(4, minutes=4)])

    assert timeline.message_ids() == [1, 4, 5]


def test_messages_of_other_threads_are_ignored() -> None:
    timeline = MessageTimeline(ThreadKey.event(7))
    direct = DirectMessage(id=9, thread_id=7, sender_id="ana", body="oi", created_at=BASE)

    assert timeline.merge(direct) is False
    timeline.replace_snapshot([direct, _message(1)])

    assert timeline.message_ids() == [1]


def test_pending_entry_is_confirmed_in_place() -> None:
    timeline = MessageTimeline(ThreadKey.event(7))
    pending = timeline.add_pending(sender_id="ana", body="oi", created_at=BASE, client_id="c1")

    assert pending.state is DeliveryState.PENDING
    assert [entry.state for entry in timeline.entries()] == [DeliveryState.PENDING]

    timeline.confirm("c1", _message(11, sender_id="ana"))

    entries = timeline.entries()
    assert len(entries) == 1
    assert entries[0].state is DeliveryState.CONFIRMED
    assert entries[0].message_id == 11
    assert entries[0].client_id == "c1"
    assert timeline.outbox_entry("c1") is None


def test_failed_entry_can_be_retried_or_discarded() -> None:
    timeline = MessageTimeline(ThreadKey.event(7))
    timeline.add_pending(sender_id="ana", body="oi", created_at=BASE, client_id="c1")
    timeline.add_pending(sender_id="ana", body="tchau", created_at=BASE, client_id="c2")

    assert timeline.retry("c1") is None
    timeline.fail("c1", "Falha ao enviar")
    timeline.fail("c2", "Falha ao enviar")

    assert timeline.outbox_entry("c1").error == "Falha ao enviar"
    retried = timeline.retry("c1")
    assert retried.state is DeliveryState.PENDING
    assert retried.error is None
    assert timeline.discard("c1") is False
    assert timeline.discard("c2") is True
    assert [entry.client_id for entry in timeline.entries()] == ["c1"]


def test_closed_timeline_ignores_late_results() -> None:
    timeline = MessageTimeline(ThreadKey.event(7))
    timeline.replace_snapshot([_message(1)])
    timeline.close()

    timeline.replace_snapshot([_message(1), _message(2, minutes=1)])
    assert timeline.merge(_message(3, minutes=2)) is False
    assert timeline.message_ids() == [1]
