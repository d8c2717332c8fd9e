"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    kind: str
    title: str
    body: str
    timestamp: datetime
    link: str
    read: bool = False


class NotificationFeedRead(BaseModel):
    items: list[NotificationRead] = Field(default_factory=list)
    unread_count: int = 0
    badge: str | None = None


class NotificationSeenRequest(BaseModel):
    """Payload sent when the user dismisses the notification panel."""

    at: datetime | None = Field(
        default=None, description="Momento da dispensa; o horário do servidor por padrão"
    )


class NotificationWatermarkRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    last_seen_at: datetime


__all__ = [
    "NotificationRead",
    "NotificationFeedRead",
    "NotificationSeenRequest",
    "NotificationWatermarkRead",
]
