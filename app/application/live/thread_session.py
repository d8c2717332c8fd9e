"""Lifecycle of one open thread view."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any

import anyio
from sqlalchemy.orm import Session

from app.application.use_cases.messaging import (
    list_messages,
    mark_read,
    mark_thread_read,
    normalize_body,
    send_message,
)
from app.config import get_settings
from app.domain.entities import AnyMessage, ThreadKey, TimelineEntry
from app.domain.exceptions import ReadMarkerWriteFailure, StoreUnavailable
from app.infrastructure.database import SessionLocal
from app.infrastructure.notifications import LiveUpdateHub, Unsubscribe, live_update_hub
from app.utils import now_in_app_timezone

from .polling import PeriodicRefresh
from .timeline import MessageTimeline

logger = logging.getLogger(__name__)


class ThreadSession:
    """Keep a :class:`MessageTimeline` in sync with the store while a thread is open.

    ``open`` loads the snapshot, marks the thread read, subscribes to live
    inserts and starts polling; ``close`` releases all of it. Store calls run
    in worker threads, each with its own database session.
    """

    def __init__(
        self,
        thread_key: ThreadKey,
        user_id: str,
        *,
        session_factory: Callable[[], Session] = SessionLocal,
        hub: LiveUpdateHub = live_update_hub,
        refresh_interval: float | None = None,
    ) -> None:
        self.thread_key = thread_key
        self.user_id = user_id
        self.timeline = MessageTimeline(thread_key)
        self._session_factory = session_factory
        self._hub = hub
        self._unsubscribe: Unsubscribe | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._background: set[asyncio.Task] = set()
        self._poller: PeriodicRefresh[list[AnyMessage]] = PeriodicRefresh(
            f"thread:{thread_key}",
            refresh_interval or get_settings().poll_open_thread_seconds,
            self._fetch_snapshot,
            self._apply_snapshot,
        )

    @property
    def is_open(self) -> bool:
        return self._unsubscribe is not None

    async def open(self) -> None:
        """Load the thread; failures to reach the store propagate to the caller."""

        self._loop = asyncio.get_running_loop()
        self.timeline.replace_snapshot(await self._fetch_snapshot())
        await self._mark_read_best_effort()
        if self.timeline.closed:
            return
        self._unsubscribe = self._hub.subscribe(self.thread_key, self._on_insert)
        self._poller.start()

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self._poller.stop()
        for task in list(self._background):
            task.cancel()
        self._background.clear()
        self.timeline.close()

    async def refresh(self) -> bool:
        return await self._poller.trigger()

    async def send(self, body: str) -> TimelineEntry:
        """Show ``body`` immediately as pending, then confirm or fail it.

        Empty bodies are rejected before anything is shown or sent. A failed
        send stays in the timeline as ``FAILED`` and the error is re-raised.
        """

        text = normalize_body(body)
        entry = self.timeline.add_pending(
            sender_id=self.user_id, body=text, created_at=now_in_app_timezone()
        )
        return await self._deliver(entry.client_id, text)

    async def retry(self, client_id: str) -> TimelineEntry:
        entry = self.timeline.retry(client_id)
        if entry is None:
            raise KeyError(client_id)
        return await self._deliver(client_id, entry.body)

    async def _deliver(self, client_id: str, text: str) -> TimelineEntry:
        try:
            message = await self._call(
                send_message, self.thread_key, sender_id=self.user_id, body=text
            )
        except Exception as exc:
            self.timeline.fail(client_id, str(exc) or type(exc).__name__)
            raise
        self.timeline.confirm(client_id, message)
        return TimelineEntry.confirmed(message, client_id=client_id)

    async def _fetch_snapshot(self) -> list[AnyMessage]:
        return await self._call(list_messages, self.thread_key, user_id=self.user_id)

    def _on_insert(self, message: AnyMessage) -> None:
        # Invoked from the publisher's thread.
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._handle_insert, message)

    def _handle_insert(self, message: AnyMessage) -> None:
        if not self.timeline.merge(message):
            return
        if message.sender_id != self.user_id:
            self._schedule_mark_read([message.id])

    def _apply_snapshot(self, messages: list[AnyMessage]) -> None:
        """Adopt a polled snapshot and mark read the messages it brought in."""

        known = set(self.timeline.message_ids())
        self.timeline.replace_snapshot(messages)
        unseen = [
            message.id
            for message in messages
            if message.id not in known and message.sender_id != self.user_id
        ]
        if unseen and not self.timeline.closed:
            self._schedule_mark_read(unseen)

    def _schedule_mark_read(self, message_ids: list[int]) -> None:
        task = asyncio.get_running_loop().create_task(self._mark_read_best_effort(message_ids))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _mark_read_best_effort(self, message_ids: Iterable[int] | None = None) -> None:
        try:
            if message_ids is None:
                await self._call(mark_thread_read, self.thread_key, self.user_id)
            else:
                await self._call(mark_read, self.thread_key.kind, list(message_ids), self.user_id)
        except (ReadMarkerWriteFailure, StoreUnavailable) as exc:
            logger.warning("Read markers for %s not stored: %s", self.thread_key, exc)

    async def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        def run() -> Any:
            with self._session_factory() as session:
                return func(session, *args, **kwargs)

        return await anyio.to_thread.run_sync(run)


__all__ = ["ThreadSession"]
