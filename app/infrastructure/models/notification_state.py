"""SQLAlchemy model for the per-user notification watermark."""

from sqlalchemy import Column, DateTime, String

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationStateModel(Base):
    """Single row per user holding the last notification panel dismissal."""

    __tablename__ = "user_notification_state"

    user_id = Column(String(36), primary_key=True)
    last_seen_at = Column(DateTime(), nullable=False)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["NotificationStateModel"]
