"""Time helpers."""
from __future__ import annotations

from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def resolve_timezone(tz_name: str) -> tzinfo:
    """Return the named zone, falling back to UTC for unknown names."""

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        return UTC


def sortable_timestamp(value: datetime | None, tz_name: str = "UTC") -> str:
    """Render ``value`` (default: now) as ``YYYY-MM-DD HH:MM:SS`` in ``tz_name``."""

    if value is None:
        value = datetime.now(UTC)
    return value.astimezone(resolve_timezone(tz_name)).strftime("%Y-%m-%d %H:%M:%S")
