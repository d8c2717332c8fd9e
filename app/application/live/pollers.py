"""Background refreshers for the inbox list and the notification badge."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import anyio
from sqlalchemy.orm import Session

from app.application.use_cases.messaging import list_dm_threads, list_event_threads
from app.application.use_cases.notifications import build_notification_feed
from app.config import get_settings
from app.domain.entities import DMThreadSummary, EventThreadSummary, NotificationFeed
from app.infrastructure.database import SessionLocal
from app.utils import now_in_app_timezone

from .polling import PeriodicRefresh


@dataclass
class Inbox:
    events: list[EventThreadSummary] = field(default_factory=list)
    direct: list[DMThreadSummary] = field(default_factory=list)


class _SessionPoller:
    """Shared start/stop/refresh plumbing around a :class:`PeriodicRefresh`."""

    _refresh: PeriodicRefresh

    async def refresh(self) -> bool:
        return await self._refresh.trigger()

    def start(self) -> None:
        self._refresh.start()

    async def stop(self) -> None:
        await self._refresh.stop()


class InboxPoller(_SessionPoller):
    """Keep the thread list of ``user_id`` fresh; the last good inbox survives errors."""

    def __init__(
        self,
        user_id: str,
        *,
        session_factory: Callable[[], Session] = SessionLocal,
        interval: float | None = None,
    ) -> None:
        self.user_id = user_id
        self.inbox: Inbox | None = None
        self._session_factory = session_factory
        self._refresh = PeriodicRefresh(
            f"inbox:{user_id}",
            interval or get_settings().poll_thread_list_seconds,
            self._fetch,
            self._apply,
        )

    async def _fetch(self) -> Inbox:
        def run() -> Inbox:
            with self._session_factory() as session:
                return Inbox(
                    events=list_event_threads(session, self.user_id),
                    direct=list_dm_threads(session, self.user_id),
                )

        return await anyio.to_thread.run_sync(run)

    def _apply(self, inbox: Inbox) -> None:
        self.inbox = inbox


class NotificationBadgePoller(_SessionPoller):
    """Rebuild the compact notification feed of ``user_id`` periodically.

    Aggregation errors are logged by :class:`PeriodicRefresh` and the previous
    feed stays visible until the next successful build.
    """

    def __init__(
        self,
        user_id: str,
        *,
        session_factory: Callable[[], Session] = SessionLocal,
        interval: float | None = None,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self.user_id = user_id
        self.feed: NotificationFeed | None = None
        self._session_factory = session_factory
        self._clock = clock
        self._refresh = PeriodicRefresh(
            f"notifications:{user_id}",
            interval or get_settings().poll_notification_badge_seconds,
            self._fetch,
            self._apply,
        )

    async def _fetch(self) -> NotificationFeed:
        def run() -> NotificationFeed:
            with self._session_factory() as session:
                return build_notification_feed(session, self.user_id, self._clock())

        return await anyio.to_thread.run_sync(run)

    def _apply(self, feed: NotificationFeed) -> None:
        self.feed = feed


__all__ = ["Inbox", "InboxPoller", "NotificationBadgePoller"]
