"""Persistence helpers for per-message read markers."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.domain.entities import ReadMarker, ThreadKind
from app.infrastructure.models import (
    DMMessageModel,
    DMReadModel,
    MessageModel,
    MessageReadModel,
)
from app.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_naive_datetime

_MODELS = {
    ThreadKind.EVENT: (MessageModel, MessageReadModel),
    ThreadKind.DM: (DMMessageModel, DMReadModel),
}


class ReadMarkerRepository:
    """Insert-if-absent access to ``message_reads`` or ``dm_reads``."""

    def __init__(self, session: Session, kind: ThreadKind) -> None:
        self.session = session
        self.kind = kind
        self.message_model, self.read_model = _MODELS[kind]

    def read_ids(self, message_ids: Iterable[int], user_id: str) -> set[int]:
        ids = {int(message_id) for message_id in message_ids}
        if not ids:
            return set()
        query = (
            self.session.query(self.read_model.message_id)
            .filter(self.read_model.user_id == user_id)
            .filter(self.read_model.message_id.in_(ids))
        )
        return {message_id for (message_id,) in query.all()}

    def list_for_user(self, message_ids: Iterable[int], user_id: str) -> list[ReadMarker]:
        ids = {int(message_id) for message_id in message_ids}
        if not ids:
            return []
        query = (
            self.session.query(self.read_model)
            .filter(self.read_model.user_id == user_id)
            .filter(self.read_model.message_id.in_(ids))
            .order_by(self.read_model.message_id.asc())
        )
        return [
            ReadMarker(
                message_id=model.message_id,
                user_id=model.user_id,
                read_at=ensure_app_timezone(model.read_at),
            )
            for model in query.all()
        ]

    def insert_missing(
        self,
        message_ids: Iterable[int],
        user_id: str,
        *,
        read_at: datetime | None = None,
    ) -> int:
        """Create markers for messages by others that ``user_id`` has not read.

        Returns the number of markers created. A marker inserted concurrently by
        another request counts as already present.
        """

        ids = {int(message_id) for message_id in message_ids}
        if not ids:
            return 0

        authored_by_others = {
            message_id
            for (message_id,) in self.session.query(self.message_model.id)
            .filter(self.message_model.id.in_(ids))
            .filter(self.message_model.sender_id != user_id)
            .all()
        }
        pending = sorted(authored_by_others - self.read_ids(authored_by_others, user_id))
        if not pending:
            return 0

        timestamp = ensure_app_naive_datetime(read_at) or now_in_app_naive_datetime()
        self.session.add_all(
            [
                self.read_model(message_id=message_id, user_id=user_id, read_at=timestamp)
                for message_id in pending
            ]
        )
        try:
            self.session.commit()
            return len(pending)
        except IntegrityError:
            self.session.rollback()

        created = 0
        for message_id in pending:
            self.session.add(
                self.read_model(message_id=message_id, user_id=user_id, read_at=timestamp)
            )
            try:
                self.session.commit()
                created += 1
            except IntegrityError:
                self.session.rollback()
        return created


__all__ = ["ReadMarkerRepository"]
