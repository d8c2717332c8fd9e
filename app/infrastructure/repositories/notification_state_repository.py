"""Persistence helpers for the notification watermark."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.domain.entities import NotificationWatermark
from app.infrastructure.models import NotificationStateModel
from app.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_naive_datetime


class NotificationStateRepository:
    """Upsert and read the single watermark row of each user."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> NotificationWatermark | None:
        model = self.session.get(NotificationStateModel, user_id)
        return self._to_entity(model) if model else None

    def upsert(self, user_id: str, last_seen_at: datetime) -> NotificationWatermark:
        seen_at = ensure_app_naive_datetime(last_seen_at)
        model = self.session.get(NotificationStateModel, user_id)
        if model is None:
            model = NotificationStateModel(
                user_id=user_id,
                last_seen_at=seen_at,
                updated_at=now_in_app_naive_datetime(),
            )
            self.session.add(model)
            try:
                self.session.commit()
            except IntegrityError:
                # Another request created the row first; overwrite it.
                self.session.rollback()
                model = self.session.get(NotificationStateModel, user_id)
                model.last_seen_at = seen_at
                self.session.commit()
        else:
            model.last_seen_at = seen_at
            model.updated_at = now_in_app_naive_datetime()
            self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: NotificationStateModel) -> NotificationWatermark:
        return NotificationWatermark(
            user_id=model.user_id,
            last_seen_at=ensure_app_timezone(model.last_seen_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationStateRepository"]
