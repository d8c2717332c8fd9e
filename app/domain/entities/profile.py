"""Domain entity representing the public profile of a user."""

from dataclasses import dataclass


@dataclass
class Profile:
    """Public attributes shown next to a user's messages."""

    user_id: str
    display_name: str | None
    avatar_url: str | None


__all__ = ["Profile"]
