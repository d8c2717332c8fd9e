"""Public helpers for the notification feed and badge."""

from .feed import FeedOptions, build_notification_feed, count_unseen, truncate_snippet
from .watermark import advance_watermark, get_watermark

__all__ = [
    "FeedOptions",
    "build_notification_feed",
    "count_unseen",
    "truncate_snippet",
    "advance_watermark",
    "get_watermark",
]
