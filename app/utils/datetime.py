"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "America/Sao_Paulo"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the configured application timezone.

    The timezone is resolved using the ``APP_TIMEZONE`` environment variable (via
    the ``Settings`` model). If the provided value cannot be resolved, the
    default ``America/Sao_Paulo`` timezone is used as a fallback.
    """

    settings = get_settings()
    tz_name = (settings.app_timezone or "").strip() or _DEFAULT_TIMEZONE
    return _resolve_timezone(tz_name)


def now_in_app_timezone() -> datetime:
    """Return the current time localized to the configured timezone."""

    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Return the current localized time without attaching ``tzinfo``."""

    localized = ensure_app_naive_datetime(now_in_app_timezone())
    if localized is None:  # pragma: no cover
        msg = "Failed to compute the application naive datetime"
        raise RuntimeError(msg)
    return localized


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Normalize ``value`` so it is expressed in the configured timezone."""

    if value is None:
        return None

    tz = get_app_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    """Return ``value`` localized to the app timezone but without ``tzinfo``.

    The store keeps naive local datetimes; the domain layer works with aware
    values and converts at the repository boundary with this helper.
    """

    localized = ensure_app_timezone(value)
    if localized is None:
        return None
    return localized.replace(tzinfo=None)


def combine_in_app_timezone(day: date, start: time) -> datetime:
    """Return the aware datetime of a slot starting at ``start`` on ``day``."""

    return datetime.combine(day, start).replace(tzinfo=get_app_timezone())


def format_relative_pt_br(moment: datetime, now: datetime) -> str:
    """Describe ``moment`` relative to ``now`` in Brazilian Portuguese.

    Mirrors the wording of ``date-fns`` ``formatDistanceToNow`` with the
    ``ptBR`` locale and ``addSuffix``: ``"em 3 horas"`` or ``"há 2 dias"``.
    """

    delta = moment - now
    seconds = abs(delta.total_seconds())
    minutes = round(seconds / 60)

    if seconds < 30:
        distance = "menos de um minuto"
    elif minutes < 45:
        distance = _plural(max(minutes, 1), "minuto", "minutos")
    elif minutes < 90:
        distance = "cerca de 1 hora"
    elif minutes < 60 * 24:
        hours = round(minutes / 60)
        distance = f"cerca de {_plural(hours, 'hora', 'horas')}"
    elif minutes < 60 * 42:
        distance = "1 dia"
    elif minutes < 60 * 24 * 30:
        distance = _plural(round(minutes / (60 * 24)), "dia", "dias")
    else:
        months = max(round(minutes / (60 * 24 * 30)), 1)
        distance = _plural(months, "mês", "meses")

    return f"em {distance}" if delta.total_seconds() > 0 else f"há {distance}"


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def _resolve_timezone(tz_name: str) -> tzinfo:
    """Resolve ``tz_name`` into a ``timezone`` instance."""

    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        match = _OFFSET_PATTERN.match(tz_name)
        if match:
            sign = -1 if match.group("sign") == "-" else 1
            hours = int(match.group("hours"))
            minutes = int(match.group("minutes") or 0)
            offset = timedelta(hours=hours, minutes=minutes)
            return timezone(sign * offset)
    return ZoneInfo(_DEFAULT_TIMEZONE)
