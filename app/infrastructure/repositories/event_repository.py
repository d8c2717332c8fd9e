"""Read access to Outs, their participants and accepted slots."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session, joinedload

from app.domain.entities import APPLICATION_STATUS_ACCEPTED, AcceptedSlot, Event, EventSlot
from app.infrastructure.models import ApplicationModel, EventModel, EventSlotModel
from app.utils import ensure_app_timezone

from .decoding import require_fields


class EventRepository:
    """Queries over ``invites``, ``invite_slots`` and ``applications``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, event_id: int) -> Event | None:
        model = self.session.get(EventModel, event_id)
        return self._to_entity(model) if model else None

    def get_map_by_ids(self, event_ids: Sequence[int]) -> dict[int, Event]:
        if not event_ids:
            return {}
        query = self.session.query(EventModel).filter(EventModel.id.in_(set(event_ids)))
        return {model.id: self._to_entity(model) for model in query.all()}

    def participant_ids(self, event_id: int) -> set[str]:
        """Return the organizer and every applicant of ``event_id``."""

        event = self.session.get(EventModel, event_id)
        if event is None:
            return set()
        applicants = (
            self.session.query(ApplicationModel.applicant_id)
            .filter(ApplicationModel.event_id == event_id)
            .all()
        )
        return {event.author_id, *(applicant_id for (applicant_id,) in applicants)}

    def event_ids_for_user(self, user_id: str) -> list[int]:
        """Return the events ``user_id`` organizes or applied to."""

        authored = self.session.query(EventModel.id).filter(EventModel.author_id == user_id)
        applied = self.session.query(ApplicationModel.event_id).filter(
            ApplicationModel.applicant_id == user_id
        )
        ids = {event_id for (event_id,) in authored.all()}
        ids.update(event_id for (event_id,) in applied.all())
        return sorted(ids)

    def accepted_slots(self, user_id: str) -> list[AcceptedSlot]:
        """Return every slot of the events where ``user_id`` was accepted."""

        applications = (
            self.session.query(ApplicationModel)
            .options(joinedload(ApplicationModel.event).selectinload(EventModel.slots))
            .filter(ApplicationModel.applicant_id == user_id)
            .filter(ApplicationModel.status == APPLICATION_STATUS_ACCEPTED)
            .all()
        )
        accepted: list[AcceptedSlot] = []
        for application in applications:
            event = application.event
            if event is None:
                continue
            for slot in event.slots:
                accepted.append(
                    AcceptedSlot(
                        event_id=event.id,
                        event_title=event.title,
                        slot=self._slot_to_entity(slot),
                    )
                )
        return accepted

    @staticmethod
    def _to_entity(model: EventModel) -> Event:
        require_fields(model, "id", "author_id", "title")
        return Event(
            id=model.id,
            author_id=model.author_id,
            title=model.title,
            created_at=ensure_app_timezone(model.created_at),
        )

    @staticmethod
    def _slot_to_entity(model: EventSlotModel) -> EventSlot:
        require_fields(model, "id", "event_id", "date", "start_time", "end_time")
        return EventSlot(
            id=model.id,
            event_id=model.event_id,
            date=model.date,
            start_time=model.start_time,
            end_time=model.end_time,
        )


__all__ = ["EventRepository"]
