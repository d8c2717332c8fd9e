"""Tests for the inbox and notification badge pollers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from app.application.live import InboxPoller, NotificationBadgePoller
from app.domain.entities import APPLICATION_STATUS_PENDING
from app.domain.exceptions import StoreUnavailable

pytestmark = pytest.mark.anyio


async def test_badge_poller_keeps_last_feed_on_failure(seed, now, monkeypatch) -> None:
    event_id = seed.event("org", applicants={"ana": APPLICATION_STATUS_PENDING})
    seed.message(event_id, "org", "oi", now - timedelta(minutes=1))
    poller = NotificationBadgePoller("ana", interval=60, clock=lambda: now)

    assert await poller.refresh() is True
    assert poller.feed.badge == "1"

    def offline(*args, **kwargs):
        raise StoreUnavailable("store offline")

    monkeypatch.setattr("app.application.live.pollers.build_notification_feed", offline)
    assert await poller.refresh() is True

    assert poller.feed.badge == "1"
    assert poller._refresh.failures == 1
    await poller.stop()


async def test_inbox_poller_lists_both_thread_kinds(seed, now) -> None:
    event_id = seed.event("org", "Praia", applicants={"ana": APPLICATION_STATUS_PENDING})
    seed.message(event_id, "org", "bora", now)
    poller = InboxPoller("ana", interval=60)

    await poller.refresh()

    assert [summary.event_id for summary in poller.inbox.events] == [event_id]
    assert poller.inbox.events[0].unread_count == 1
    assert poller.inbox.direct == []
    await poller.stop()
