"""goOut messaging and notification service."""
