"""Use cases for the notification badge watermark."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from app.domain.entities import NotificationWatermark
from app.infrastructure.database import translate_store_errors
from app.infrastructure.repositories import NotificationStateRepository
from app.utils import ensure_app_timezone, now_in_app_timezone


def advance_watermark(
    session: Session, user_id: str, at: datetime | None = None
) -> NotificationWatermark:
    """Record that ``user_id`` dismissed the notification panel at ``at``.

    Only silences the badge; individual messages keep their read state.
    """

    seen_at = ensure_app_timezone(at) or now_in_app_timezone()
    with translate_store_errors(session, "notifications.watermark"):
        return NotificationStateRepository(session).upsert(user_id, seen_at)


def get_watermark(session: Session, user_id: str) -> NotificationWatermark | None:
    with translate_store_errors(session, "notifications.watermark"):
        return NotificationStateRepository(session).get(user_id)


__all__ = ["advance_watermark", "get_watermark"]
