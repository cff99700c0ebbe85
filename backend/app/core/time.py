from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored and compared throughout the app."""
    return datetime.now(UTC).replace(tzinfo=None)


def isoformat_z(value: datetime) -> str:
    """Render a UTC timestamp as ``2026-10-19T08:30:00.123Z``."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"
