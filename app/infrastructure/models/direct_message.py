"""SQLAlchemy models for direct-message threads, messages and read markers."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class DMThreadModel(Base):
    """Conversation between two users, stored once per unordered pair."""

    __tablename__ = "dm_threads"
    __table_args__ = (
        UniqueConstraint("user_a", "user_b", name="uq_dm_threads_pair"),
        CheckConstraint("user_a < user_b", name="ck_dm_threads_ordered_pair"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_a = Column(String(36), nullable=False, index=True)
    user_b = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


class DMMessageModel(Base):
    """Append-only message posted to a direct-message thread."""

    __tablename__ = "dm_messages"
    __table_args__ = (Index("ix_dm_messages_thread_created", "thread_id", "created_at", "id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    thread_id = Column(
        Integer, ForeignKey("dm_threads.id", ondelete="CASCADE"), nullable=False
    )
    sender_id = Column(String(36), nullable=False, index=True)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


class DMReadModel(Base):
    """Marker stating that ``user_id`` read the direct message ``message_id``."""

    __tablename__ = "dm_reads"
    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_dm_reads_message_user"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    message_id = Column(
        Integer, ForeignKey("dm_messages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(36), nullable=False, index=True)
    read_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["DMThreadModel", "DMMessageModel", "DMReadModel"]
