"""SQLAlchemy models for event-scoped messages and their read markers."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class MessageModel(Base):
    """Append-only message posted to an Out's chat."""

    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_invite_created", "invite_id", "created_at", "id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(
        "invite_id",
        Integer,
        ForeignKey("invites.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id = Column(String(36), nullable=False, index=True)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


class MessageReadModel(Base):
    """Marker stating that ``user_id`` read ``message_id``."""

    __tablename__ = "message_reads"
    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_message_reads_message_user"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    message_id = Column(
        Integer, ForeignKey("messages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(36), nullable=False, index=True)
    read_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["MessageModel", "MessageReadModel"]
