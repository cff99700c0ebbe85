from __future__ import annotations

from pydantic import field_validator
from sqlmodel import SQLModel

from app.schemas.common import require_iso_datetime, require_text


class TaskCreate(SQLModel):
    """Completion flag and creation time are server-set and cannot be supplied."""

    text: str
    assigned_to: int | None = None
    due_date: str | None = None

    @field_validator("text")
    @classmethod
    def _text(cls, value: str) -> str:
        return require_text(value, "text")

    @field_validator("due_date")
    @classmethod
    def _due_date(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return require_iso_datetime(value)


class TaskUpdate(SQLModel):
    text: str | None = None
    is_completed: bool | None = None
    assigned_to: int | None = None
    due_date: str | None = None

    @field_validator("text")
    @classmethod
    def _text(cls, value: str | None) -> str | None:
        return None if value is None else require_text(value, "text")

    @field_validator("due_date")
    @classmethod
    def _due_date(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return require_iso_datetime(value)

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)
