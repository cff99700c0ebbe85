from __future__ import annotations

from sqlmodel import Field, SQLModel


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: int | None = Field(default=None, primary_key=True)
    text: str
    is_completed: bool = Field(default=False, index=True)

    # Weak reference to employees.id: may point at a deleted employee.
    assigned_to: int | None = Field(default=None, index=True)

    created_at: str  # ISO-8601 UTC, set by the server on insert
    due_date: str | None = None
