"""Persistence helpers for direct-message threads."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.domain.entities import DMThread
from app.infrastructure.models import DMThreadModel
from app.utils import ensure_app_timezone, now_in_app_naive_datetime

from .decoding import require_fields


class DMThreadRepository:
    """Provide lookups and creation for :class:`DMThread` rows.

    Callers pass the pair already in canonical order; the table enforces
    uniqueness of ``(user_a, user_b)``.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, thread_id: int) -> DMThread | None:
        model = self.session.get(DMThreadModel, thread_id)
        return self._to_entity(model) if model else None

    def get_by_pair(self, user_a: str, user_b: str) -> DMThread | None:
        model = (
            self.session.query(DMThreadModel)
            .filter(DMThreadModel.user_a == user_a, DMThreadModel.user_b == user_b)
            .first()
        )
        return self._to_entity(model) if model else None

    def create(self, user_a: str, user_b: str) -> DMThread:
        """Insert the pair; integrity errors propagate after rolling back."""

        model = DMThreadModel(
            user_a=user_a, user_b=user_b, created_at=now_in_app_naive_datetime()
        )
        self.session.add(model)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(model)
        return self._to_entity(model)

    def list_for_user(self, user_id: str) -> Sequence[DMThread]:
        query = (
            self.session.query(DMThreadModel)
            .filter(or_(DMThreadModel.user_a == user_id, DMThreadModel.user_b == user_id))
            .order_by(DMThreadModel.created_at.desc(), DMThreadModel.id.desc())
        )
        return [self._to_entity(model) for model in query.all()]

    def count_for_pair(self, user_a: str, user_b: str) -> int:
        return (
            self.session.query(DMThreadModel)
            .filter(DMThreadModel.user_a == user_a, DMThreadModel.user_b == user_b)
            .count()
        )

    @staticmethod
    def _to_entity(model: DMThreadModel) -> DMThread:
        require_fields(model, "id", "user_a", "user_b")
        return DMThread(
            id=model.id,
            user_a=model.user_a,
            user_b=model.user_b,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["DMThreadRepository"]
