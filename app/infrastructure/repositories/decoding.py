"""Checks applied when decoding store rows into domain entities."""

from __future__ import annotations

from typing import Any

from app.domain.exceptions import RowDecodeError


def require_fields(model: Any, *names: str) -> None:
    """Raise :class:`RowDecodeError` when any of ``names`` is missing on ``model``."""

    missing = [name for name in names if getattr(model, name, None) is None]
    if missing:
        table = getattr(model, "__tablename__", type(model).__name__)
        raise RowDecodeError(f"Row from '{table}' is missing {', '.join(missing)}")


__all__ = ["require_fields"]
