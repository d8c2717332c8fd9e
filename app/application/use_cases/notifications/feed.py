"""Build the notification feed from unread messages and upcoming slots."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.domain.entities import (
    AcceptedSlot,
    AnyMessage,
    DirectMessage,
    NotificationFeed,
    NotificationItem,
    NotificationKind,
    NotificationWatermark,
    ThreadKind,
)
from app.infrastructure.database import translate_store_errors
from app.infrastructure.repositories import (
    DMThreadRepository,
    DirectMessageRepository,
    EventRepository,
    MessageRepository,
    NotificationStateRepository,
    ProfileRepository,
    ReadMarkerRepository,
)
from app.utils import (
    combine_in_app_timezone,
    ensure_app_timezone,
    format_relative_pt_br,
    now_in_app_timezone,
)

UPCOMING_WINDOW = timedelta(hours=24)
RECENT_PAST_WINDOW = timedelta(hours=24)
UNKNOWN_SENDER = "Usuário"
ELLIPSIS = "..."


@dataclass(frozen=True)
class FeedOptions:
    """Knobs that differ between the dropdown and the notifications page."""

    full: bool
    limit: int | None
    fetch_window: int
    snippet_length: int

    @classmethod
    def from_settings(cls, settings: Settings, *, full: bool) -> "FeedOptions":
        if full:
            return cls(
                full=True,
                limit=None,
                fetch_window=settings.notification_full_fetch_window,
                snippet_length=settings.notification_full_snippet_length,
            )
        return cls(
            full=False,
            limit=settings.notification_compact_limit,
            fetch_window=settings.notification_compact_fetch_window,
            snippet_length=settings.notification_compact_snippet_length,
        )


def build_notification_feed(
    session: Session,
    user_id: str,
    now: datetime | None = None,
    *,
    full: bool = False,
    settings: Settings | None = None,
) -> NotificationFeed:
    """Merge unread messages and upcoming slots of ``user_id`` into one feed.

    Items are ordered by timestamp, newest first, and de-duplicated by id. The
    compact feed is truncated to the configured limit; ``unread_count`` is
    computed from the untruncated set and only counts items that appeared
    after the user's watermark. Building never writes to the store.
    """

    settings = settings or get_settings()
    options = FeedOptions.from_settings(settings, full=full)
    reference = ensure_app_timezone(now) or now_in_app_timezone()

    with translate_store_errors(session, "notifications.build"):
        items = _message_items(
            session, user_id, options, scope=settings.notification_message_scope
        )
        slots = EventRepository(session).accepted_slots(user_id)
        items.extend(_event_items(slots, reference, options))
        watermark = NotificationStateRepository(session).get(user_id)

    merged = sorted(_dedupe(items), key=lambda item: item.timestamp, reverse=True)
    unread = count_unseen(merged, watermark)
    if options.limit is not None:
        merged = merged[: options.limit]
    return NotificationFeed(items=merged, unread_count=unread)


def count_unseen(
    items: Iterable[NotificationItem], watermark: NotificationWatermark | None
) -> int:
    """Count unread items that became visible after ``watermark``."""

    unread = [item for item in items if not item.read]
    if watermark is None:
        return len(unread)
    return sum(1 for item in unread if item.visible_since > watermark.last_seen_at)


def truncate_snippet(body: str, length: int) -> str:
    if len(body) <= length:
        return body
    return body[:length] + ELLIPSIS


def _message_items(
    session: Session, user_id: str, options: FeedOptions, *, scope: str
) -> list[NotificationItem]:
    if scope == "participant":
        event_ids: list[int] | None = EventRepository(session).event_ids_for_user(user_id)
        dm_thread_ids: list[int] | None = [
            thread.id for thread in DMThreadRepository(session).list_for_user(user_id)
        ]
    else:
        event_ids = None
        dm_thread_ids = None

    candidates: list[tuple[ThreadKind, list[AnyMessage]]] = [
        (
            ThreadKind.EVENT,
            list(
                MessageRepository(session).list_recent_from_others(
                    user_id, limit=options.fetch_window, thread_ids=event_ids
                )
            ),
        ),
        (
            ThreadKind.DM,
            list(
                DirectMessageRepository(session).list_recent_from_others(
                    user_id, limit=options.fetch_window, thread_ids=dm_thread_ids
                )
            ),
        ),
    ]

    sender_ids = {message.sender_id for _, messages in candidates for message in messages}
    profiles = ProfileRepository(session).get_map_by_ids(sender_ids)

    items: list[NotificationItem] = []
    for kind, messages in candidates:
        already_read = ReadMarkerRepository(session, kind).read_ids(
            (message.id for message in messages), user_id
        )
        for message in messages:
            if message.id in already_read:
                continue
            profile = profiles.get(message.sender_id)
            sender_name = (profile.display_name if profile else None) or UNKNOWN_SENDER
            items.append(
                NotificationItem(
                    id=_message_item_id(message),
                    kind=NotificationKind.MESSAGE,
                    title=f"Nova mensagem de {sender_name}",
                    body=truncate_snippet(message.body, options.snippet_length),
                    timestamp=message.created_at,
                    link=_message_link(message),
                    visible_since=message.created_at,
                )
            )
    return items


def _event_items(
    slots: Iterable[AcceptedSlot], now: datetime, options: FeedOptions
) -> list[NotificationItem]:
    items: list[NotificationItem] = []
    for accepted in slots:
        starts_at = combine_in_app_timezone(accepted.slot.date, accepted.slot.start_time)
        until = starts_at - now
        if options.full:
            if until <= -RECENT_PAST_WINDOW:
                continue
            title = f'Out "{accepted.event_title}"'
        else:
            if until <= timedelta(0) or until > UPCOMING_WINDOW:
                continue
            title = f'Seu Out "{accepted.event_title}" começa em breve'

        happened = until <= timedelta(0)
        prefix = "Aconteceu" if happened else "Começando"
        items.append(
            NotificationItem(
                id=f"event-{accepted.event_id}-{accepted.slot.date.isoformat()}",
                kind=NotificationKind.UPCOMING_EVENT,
                title=title,
                body=f"{prefix} {format_relative_pt_br(starts_at, now)}",
                timestamp=starts_at,
                link=f"/out/{accepted.event_id}",
                visible_since=starts_at - UPCOMING_WINDOW,
                read=happened,
            )
        )
    return items


def _dedupe(items: Iterable[NotificationItem]) -> list[NotificationItem]:
    seen: set[str] = set()
    unique: list[NotificationItem] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def _message_item_id(message: AnyMessage) -> str:
    if isinstance(message, DirectMessage):
        return f"dm-{message.id}"
    return f"msg-{message.id}"


def _message_link(message: AnyMessage) -> str:
    if isinstance(message, DirectMessage):
        return f"/mensagens?dm={message.thread_id}"
    return f"/out/{message.event_id}/chat"


__all__ = [
    "FeedOptions",
    "build_notification_feed",
    "count_unseen",
    "truncate_snippet",
]
