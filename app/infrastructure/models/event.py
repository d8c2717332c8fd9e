"""SQLAlchemy models for Outs, their slots and applications."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Time
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class EventModel(Base):
    """Database representation of an Out."""

    __tablename__ = "invites"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(String(36), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    slots = relationship(
        "EventSlotModel",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="EventSlotModel.date",
    )


class EventSlotModel(Base):
    """Date and time window offered by an Out."""

    __tablename__ = "invite_slots"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        "invite_id",
        Integer,
        ForeignKey("invites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    event = relationship("EventModel", back_populates="slots")


class ApplicationModel(Base):
    """Request of a user to join an Out."""

    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        "invite_id",
        Integer,
        ForeignKey("invites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    applicant_id = Column(String(36), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pendente")
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    event = relationship("EventModel", lazy="joined")


__all__ = ["EventModel", "EventSlotModel", "ApplicationModel"]
