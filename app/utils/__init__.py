"""Utility helpers for reusable functionality."""

from .datetime import (
    combine_in_app_timezone,
    ensure_app_naive_datetime,
    ensure_app_timezone,
    format_relative_pt_br,
    get_app_timezone,
    now_in_app_naive_datetime,
    now_in_app_timezone,
)

__all__ = [
    "combine_in_app_timezone",
    "ensure_app_naive_datetime",
    "ensure_app_timezone",
    "format_relative_pt_br",
    "get_app_timezone",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
]
