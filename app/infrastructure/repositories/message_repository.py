"""Persistence helpers for the append-only message logs."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import and_, exists, func, or_
from sqlalchemy.orm import Session

from app.domain.entities import DirectMessage, Message
from app.infrastructure.models import (
    DMMessageModel,
    DMReadModel,
    MessageModel,
    MessageReadModel,
)
from app.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_naive_datetime

from .decoding import require_fields

EntityT = TypeVar("EntityT", Message, DirectMessage)


class _ThreadMessageRepository(Generic[EntityT]):
    """Shared queries for a message table partitioned by a thread column.

    Every listing is ordered by ``(created_at, id)`` so equal timestamps keep
    the insertion order of the store.
    """

    model: Any
    read_model: Any
    thread_attr: str

    def __init__(self, session: Session) -> None:
        self.session = session

    @property
    def _thread_column(self):
        return getattr(self.model, self.thread_attr)

    def append(
        self,
        thread_id: int,
        *,
        sender_id: str,
        body: str,
        created_at: datetime | None = None,
    ) -> EntityT:
        model = self.model(
            sender_id=sender_id,
            body=body,
            created_at=ensure_app_naive_datetime(created_at) or now_in_app_naive_datetime(),
        )
        setattr(model, self.thread_attr, thread_id)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, message_id: int) -> EntityT | None:
        model = self.session.get(self.model, message_id)
        return self._to_entity(model) if model else None

    def list_for_thread(self, thread_id: int, *, since_id: int | None = None) -> list[EntityT]:
        query = self.session.query(self.model).filter(self._thread_column == thread_id)
        if since_id is not None:
            anchor = (
                self.session.query(self.model)
                .filter(self.model.id == since_id, self._thread_column == thread_id)
                .first()
            )
            if anchor is None:
                query = query.filter(self.model.id > since_id)
            else:
                query = query.filter(
                    or_(
                        self.model.created_at > anchor.created_at,
                        and_(
                            self.model.created_at == anchor.created_at,
                            self.model.id > anchor.id,
                        ),
                    )
                )
        query = query.order_by(self.model.created_at.asc(), self.model.id.asc())
        return [self._to_entity(model) for model in query.all()]

    def list_ids_from_others(self, thread_id: int, user_id: str) -> list[int]:
        query = (
            self.session.query(self.model.id)
            .filter(self._thread_column == thread_id)
            .filter(self.model.sender_id != user_id)
        )
        return [message_id for (message_id,) in query.all()]

    def list_recent_from_others(
        self,
        user_id: str,
        *,
        limit: int,
        thread_ids: Iterable[int] | None = None,
    ) -> list[EntityT]:
        """Return the newest messages not sent by ``user_id``.

        ``thread_ids`` restricts the search to those threads; ``None`` searches
        every thread of the store.
        """

        query = self.session.query(self.model).filter(self.model.sender_id != user_id)
        if thread_ids is not None:
            ids = list(set(thread_ids))
            if not ids:
                return []
            query = query.filter(self._thread_column.in_(ids))
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc()).limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def last_messages(self, thread_ids: Sequence[int]) -> dict[int, EntityT]:
        """Return the latest message of each thread in ``thread_ids``."""

        if not thread_ids:
            return {}
        position = (
            func.row_number()
            .over(
                partition_by=self._thread_column,
                order_by=(self.model.created_at.desc(), self.model.id.desc()),
            )
            .label("position")
        )
        ranked = (
            self.session.query(self.model.id.label("id"), position)
            .filter(self._thread_column.in_(set(thread_ids)))
            .subquery()
        )
        query = (
            self.session.query(self.model)
            .join(ranked, self.model.id == ranked.c.id)
            .filter(ranked.c.position == 1)
        )
        latest: dict[int, EntityT] = {}
        for model in query.all():
            entity = self._to_entity(model)
            latest[getattr(model, self.thread_attr)] = entity
        return latest

    def unread_counts(self, thread_ids: Sequence[int], user_id: str) -> dict[int, int]:
        """Count messages by others lacking a read marker for ``user_id``."""

        if not thread_ids:
            return {}
        already_read = exists().where(
            self.read_model.message_id == self.model.id,
            self.read_model.user_id == user_id,
        )
        query = (
            self.session.query(self._thread_column, func.count(self.model.id))
            .filter(self._thread_column.in_(set(thread_ids)))
            .filter(self.model.sender_id != user_id)
            .filter(~already_read)
            .group_by(self._thread_column)
        )
        counts = {thread_id: 0 for thread_id in thread_ids}
        counts.update({thread_id: count for thread_id, count in query.all()})
        return counts

    def count_unread(self, thread_id: int, user_id: str) -> int:
        return self.unread_counts([thread_id], user_id).get(thread_id, 0)

    def _to_entity(self, model: Any) -> EntityT:  # pragma: no cover - overridden
        raise NotImplementedError


class MessageRepository(_ThreadMessageRepository[Message]):
    """Provide append and ordered reads for event-scoped :class:`Message` rows."""

    model = MessageModel
    read_model = MessageReadModel
    thread_attr = "event_id"

    def _to_entity(self, model: MessageModel) -> Message:
        require_fields(model, "id", "event_id", "sender_id", "body", "created_at")
        return Message(
            id=model.id,
            event_id=model.event_id,
            sender_id=model.sender_id,
            body=model.body,
            created_at=ensure_app_timezone(model.created_at),
        )


class DirectMessageRepository(_ThreadMessageRepository[DirectMessage]):
    """Provide append and ordered reads for :class:`DirectMessage` rows."""

    model = DMMessageModel
    read_model = DMReadModel
    thread_attr = "thread_id"

    def _to_entity(self, model: DMMessageModel) -> DirectMessage:
        require_fields(model, "id", "thread_id", "sender_id", "body", "created_at")
        return DirectMessage(
            id=model.id,
            thread_id=model.thread_id,
            sender_id=model.sender_id,
            body=model.body,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["MessageRepository", "DirectMessageRepository"]
