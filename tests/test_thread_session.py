"""Tests for the open-thread lifecycle: snapshot, live inserts and optimistic sends."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.application.live import ThreadSession
from app.application.use_cases.messaging import send_message, unread_count
from app.domain.entities import APPLICATION_STATUS_PENDING, DeliveryState, ThreadKey
from app.domain.exceptions import EmptyMessageError, StoreUnavailable
from app.infrastructure.database import SessionLocal
from app.infrastructure.notifications import live_update_hub
from app.infrastructure.repositories import ReadMarkerRepository

pytestmark = pytest.mark.anyio


async def _eventually(predicate, timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


def _unread(key: ThreadKey, user_id: str) -> int:
    with SessionLocal() as db:
        return unread_count(db, key, user_id)


def _send_from_other_request(key: ThreadKey, sender_id: str, body: str):
    with SessionLocal() as db:
        return send_message(db, key, sender_id=sender_id, body=body)


async def test_open_loads_snapshot_and_marks_thread_read(seed, now) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    first = seed.message(event_id, "org", "bem-vindos", now - timedelta(minutes=2))
    second = seed.message(event_id, "ana", "oi!", now - timedelta(minutes=1))
    key = ThreadKey.event(event_id)

    thread = ThreadSession(key, "ana", refresh_interval=60)
    await thread.open()
    try:
        assert thread.is_open
        assert thread.timeline.message_ids() == [first, second]
        assert _unread(key, "ana") == 0
        assert live_update_hub.subscriber_count(key) == 1
    finally:
        await thread.close()

    assert live_update_hub.subscriber_count(key) == 0
    assert not thread.is_open


async def test_live_insert_is_merged_once_and_marked_read(seed) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    key = ThreadKey.event(event_id)
    thread = ThreadSession(key, "ana", refresh_interval=60)
    await thread.open()
    try:
        message = _send_from_other_request(key, "org", "chegando!")
        await _eventually(lambda: message.id in thread.timeline.message_ids())
        await _eventually(lambda: _unread(key, "ana") == 0)

        await thread.refresh()
        assert thread.timeline.message_ids() == [message.id]
    finally:
        await thread.close()


async def test_send_shows_confirmed_entry(seed) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    thread = ThreadSession(ThreadKey.event(event_id), "ana", refresh_interval=60)
    await thread.open()
    try:
        entry = await thread.send("  partiu  ")
        await asyncio.sleep(0.05)

        assert entry.state is DeliveryState.CONFIRMED
        entries = thread.timeline.entries()
        assert [(e.state, e.body) for e in entries] == [(DeliveryState.CONFIRMED, "partiu")]
    finally:
        await thread.close()


async def test_empty_send_is_rejected_before_showing_anything(seed) -> None:
    event_id = seed.event("org")
    thread = ThreadSession(ThreadKey.event(event_id), "org", refresh_interval=60)
    await thread.open()
    try:
        with pytest.raises(EmptyMessageError):
            await thread.send("   ")
        assert thread.timeline.entries() == []
    finally:
        await thread.close()


async def test_failed_send_stays_in_timeline_and_can_be_retried(seed, monkeypatch) -> None:
    event_id = seed.event("org")
    thread = ThreadSession(ThreadKey.event(event_id), "org", refresh_interval=60)
    await thread.open()
    try:
        def offline(*args, **kwargs):
            raise StoreUnavailable("store offline")

        with monkeypatch.context() as patch:
            patch.setattr("app.application.live.thread_session.send_message", offline)
            with pytest.raises(StoreUnavailable):
                await thread.send("vamos?")

        [failed] = thread.timeline.entries()
        assert failed.state is DeliveryState.FAILED
        assert failed.error == "store offline"

        confirmed = await thread.retry(failed.client_id)
        assert confirmed.state is DeliveryState.CONFIRMED
        assert [e.state for e in thread.timeline.entries()] == [DeliveryState.CONFIRMED]
    finally:
        await thread.close()


async def test_open_propagates_store_failures(seed, monkeypatch) -> None:
    event_id = seed.event("org")

    def offline(*args, **kwargs):
        raise StoreUnavailable("store offline")

    monkeypatch.setattr("app.application.live.thread_session.list_messages", offline)
    thread = ThreadSession(ThreadKey.event(event_id), "org", refresh_interval=60)

    with pytest.raises(StoreUnavailable):
        await thread.open()
    assert not thread.is_open


async def test_closed_session_ignores_late_inserts(seed) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    key = ThreadKey.event(event_id)
    thread = ThreadSession(key, "ana", refresh_interval=60)
    await thread.open()
    await thread.close()

    _send_from_other_request(key, "org", "tarde demais")
    await asyncio.sleep(0.05)

    assert thread.timeline.message_ids() == []


async def test_polled_messages_are_marked_read(seed, now) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    key = ThreadKey.event(event_id)
    thread = ThreadSession(key, "ana", refresh_interval=60)
    await thread.open()
    try:
        await _eventually(lambda: thread._poller.completed >= 1)
        message_id = seed.message(event_id, "org", "sem aviso ao vivo", now)

        assert await thread.refresh() is True
        assert message_id in thread.timeline.message_ids()
        await _eventually(lambda: _unread(key, "ana") == 0)
    finally:
        await thread.close()


async def test_open_succeeds_when_read_markers_cannot_be_written(
    seed, now, monkeypatch, caplog
) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    message_id = seed.message(event_id, "org", "oi", now)
    key = ThreadKey.event(event_id)

    def broken_insert(self, message_ids, user_id, *, read_at=None):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ReadMarkerRepository, "insert_missing", broken_insert)
    thread = ThreadSession(key, "ana", refresh_interval=60)
    await thread.open()
    try:
        assert thread.is_open
        assert thread.timeline.message_ids() == [message_id]
        assert _unread(key, "ana") == 1
        assert "not stored" in caplog.text
    finally:
        await thread.close()
