"""Request and response models of the HTTP API."""

from .message import (
    DMResolveRequest,
    DMThreadRead,
    DMThreadSummaryRead,
    DirectMessageRead,
    EventThreadSummaryRead,
    MessageCreate,
    MessageRead,
    ReadReceiptRead,
    ThreadListRead,
)
from .notification import (
    NotificationFeedRead,
    NotificationRead,
    NotificationSeenRequest,
    NotificationWatermarkRead,
)

__all__ = [
    "DMResolveRequest",
    "DMThreadRead",
    "DMThreadSummaryRead",
    "DirectMessageRead",
    "EventThreadSummaryRead",
    "MessageCreate",
    "MessageRead",
    "ReadReceiptRead",
    "ThreadListRead",
    "NotificationFeedRead",
    "NotificationRead",
    "NotificationSeenRequest",
    "NotificationWatermarkRead",
]
