from __future__ import annotations

from datetime import date, datetime

from sqlmodel import SQLModel


class OkResponse(SQLModel):
    ok: bool = True


class CreatedResponse(SQLModel):
    id: int


def require_text(value: str, field_name: str) -> str:
    """Strip ``value`` and reject it when nothing is left."""
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} is required")
    return cleaned


def blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def require_iso_date(value: str) -> str:
    cleaned = value.strip()
    try:
        date.fromisoformat(cleaned)
    except ValueError as exc:
        raise ValueError("must be an ISO date (YYYY-MM-DD)") from exc
    return cleaned


def require_iso_datetime(value: str) -> str:
    """Accept an ISO date or date-time; the original text is kept."""
    cleaned = value.strip()
    try:
        datetime.fromisoformat(cleaned)
    except ValueError as exc:
        raise ValueError("must be an ISO date or date-time") from exc
    return cleaned
