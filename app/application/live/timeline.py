"""In-memory view of one thread merging snapshots, live pushes and optimistic sends."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import uuid4

from app.domain.entities import AnyMessage, DeliveryState, ThreadKey, TimelineEntry


class MessageTimeline:
    """Ordered messages of an open thread.

    Store-confirmed messages are keyed by id, so a row received both from a
    ``list()`` snapshot and from a live push appears once. Optimistic sends
    live in an outbox until the store confirms them (``CONFIRMED``) or the
    call fails (``FAILED``). Once closed, every mutation is ignored.
    """

    def __init__(self, thread_key: ThreadKey) -> None:
        self.thread_key = thread_key
        self._confirmed: dict[int, TimelineEntry] = {}
        self._outbox: dict[str, TimelineEntry] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def replace_snapshot(self, messages: Iterable[AnyMessage]) -> None:
        """Adopt ``messages`` as the authoritative list.

        Rows pushed after the snapshot was read (ids above the snapshot's
        newest id) are kept.
        """

        if self._closed:
            return
        snapshot = {
            message.id: TimelineEntry.confirmed(message)
            for message in messages
            if message.thread_key == self.thread_key
        }
        newest = max(snapshot, default=0)
        for message_id, entry in self._confirmed.items():
            if message_id > newest:
                snapshot[message_id] = entry
        self._confirmed = snapshot

    def merge(self, message: AnyMessage) -> bool:
        """Add a live-pushed ``message``; return ``False`` for duplicates."""

        if self._closed or message.thread_key != self.thread_key:
            return False
        if message.id in self._confirmed:
            return False
        self._confirmed[message.id] = TimelineEntry.confirmed(message)
        return True

    def add_pending(
        self,
        *,
        sender_id: str,
        body: str,
        created_at: datetime,
        client_id: str | None = None,
    ) -> TimelineEntry:
        entry = TimelineEntry.pending(
            client_id=client_id or uuid4().hex,
            sender_id=sender_id,
            body=body,
            created_at=created_at,
        )
        if not self._closed:
            self._outbox[entry.client_id] = entry
        return entry

    def confirm(self, client_id: str, message: AnyMessage) -> bool:
        """Swap the pending entry ``client_id`` for the stored ``message``."""

        if self._closed:
            return False
        self._outbox.pop(client_id, None)
        self._confirmed[message.id] = TimelineEntry.confirmed(message, client_id=client_id)
        return True

    def fail(self, client_id: str, error: str) -> bool:
        if self._closed:
            return False
        entry = self._outbox.get(client_id)
        if entry is None:
            return False
        self._outbox[client_id] = entry.failed(error)
        return True

    def retry(self, client_id: str) -> TimelineEntry | None:
        """Move a failed entry back to pending; return it, or ``None`` if absent."""

        if self._closed:
            return None
        entry = self._outbox.get(client_id)
        if entry is None or entry.state is not DeliveryState.FAILED:
            return None
        pending = entry.retried()
        self._outbox[client_id] = pending
        return pending

    def discard(self, client_id: str) -> bool:
        """Drop a failed entry the user gave up on."""

        entry = self._outbox.get(client_id)
        if entry is None or entry.state is not DeliveryState.FAILED:
            return False
        del self._outbox[client_id]
        return True

    def outbox_entry(self, client_id: str) -> TimelineEntry | None:
        return self._outbox.get(client_id)

    def entries(self) -> list[TimelineEntry]:
        """Confirmed entries in store order followed by the outbox in send order."""

        confirmed = sorted(
            self._confirmed.values(), key=lambda entry: (entry.created_at, entry.message_id)
        )
        return confirmed + list(self._outbox.values())

    def message_ids(self) -> list[int]:
        return [entry.message_id for entry in self.entries() if entry.message_id is not None]

    @property
    def last_message_id(self) -> int | None:
        return max(self._confirmed, default=None)


__all__ = ["MessageTimeline"]
