"""Pydantic models describing threads and messages."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Payload used to post a message to a thread."""

    body: str = Field(..., max_length=4000, description="Texto da mensagem")


class MessageRead(BaseModel):
    """Message of an event thread."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    sender_id: str
    body: str
    created_at: datetime


class DirectMessageRead(BaseModel):
    """Message of a direct-message thread."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    thread_id: int
    sender_id: str
    body: str
    created_at: datetime


class DMResolveRequest(BaseModel):
    """Start or resume a conversation with ``other_user_id``."""

    other_user_id: str = Field(..., min_length=1, max_length=36)


class DMThreadRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_a: str
    user_b: str
    created_at: datetime | None = None


class EventThreadSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: int
    title: str
    last_message_at: datetime | None = None
    last_message_body: str | None = None
    last_message_sender_id: str | None = None
    unread_count: int = 0


class DMThreadSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    thread_id: int
    other_user_id: str
    other_display_name: str | None = None
    other_avatar_url: str | None = None
    last_message_at: datetime | None = None
    last_message_body: str | None = None
    last_message_sender_id: str | None = None
    unread_count: int = 0


class ThreadListRead(BaseModel):
    events: list[EventThreadSummaryRead] = Field(default_factory=list)
    direct: list[DMThreadSummaryRead] = Field(default_factory=list)


class ReadReceiptRead(BaseModel):
    """Outcome of marking a thread as read."""

    marked: int
    unread_count: int | None = None


__all__ = [
    "MessageCreate",
    "MessageRead",
    "DirectMessageRead",
    "DMResolveRequest",
    "DMThreadRead",
    "EventThreadSummaryRead",
    "DMThreadSummaryRead",
    "ThreadListRead",
    "ReadReceiptRead",
]
