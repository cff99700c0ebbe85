from __future__ import annotations

from typing import Literal

from pydantic import ValidationInfo, field_validator
from sqlmodel import Field, SQLModel

from app.schemas.common import blank_to_none, require_iso_date, require_text

EmployeeStatus = Literal["active", "inactive", "terminated"]

# Choices offered by the employee form. Not enforced on write.
DEPARTMENT_OPTIONS: tuple[str, ...] = (
    "Engineering",
    "Marketing",
    "Sales",
    "Human Resources",
    "Finance",
    "Operations",
    "Customer Support",
    "Product",
    "Design",
)


def normalize_email(value: str) -> str:
    cleaned = value.strip().lower()
    if not cleaned:
        raise ValueError("email is required")
    if "@" not in cleaned:
        raise ValueError("please enter a valid email")
    return cleaned


class DepartmentCreate(SQLModel):
    name: str
    description: str | None = None
    manager_id: int | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        return require_text(value, "name")

    @field_validator("description")
    @classmethod
    def _description(cls, value: str | None) -> str | None:
        return blank_to_none(value)


class DepartmentUpdate(SQLModel):
    name: str | None = None
    description: str | None = None
    manager_id: int | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, value: str | None) -> str | None:
        return None if value is None else require_text(value, "name")

    @field_validator("description")
    @classmethod
    def _description(cls, value: str | None) -> str | None:
        return blank_to_none(value)


class EmployeeCreate(SQLModel):
    """Fields accepted when adding an employee.

    Identity and status are not accepted: the store assigns the id and every
    new employee starts as ``active``. Unknown keys are ignored.
    """

    first_name: str
    last_name: str
    email: str
    department: str
    position: str
    salary: float = Field(gt=0)
    hire_date: str
    phone: str | None = None
    address: str | None = None

    @field_validator("first_name", "last_name", "department", "position")
    @classmethod
    def _required_text(cls, value: str, info: ValidationInfo) -> str:
        return require_text(value, info.field_name)

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("hire_date")
    @classmethod
    def _hire_date(cls, value: str) -> str:
        return require_iso_date(value)

    @field_validator("phone", "address")
    @classmethod
    def _optional_text(cls, value: str | None) -> str | None:
        return blank_to_none(value)


class EmployeeUpdate(SQLModel):
    """Partial update. A field left out and a field sent as null both mean "keep"."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    department: str | None = None
    position: str | None = None
    salary: float | None = Field(default=None, gt=0)
    hire_date: str | None = None
    status: EmployeeStatus | None = None
    phone: str | None = None
    address: str | None = None

    @field_validator("first_name", "last_name", "department", "position")
    @classmethod
    def _required_text(cls, value: str | None, info: ValidationInfo) -> str | None:
        return None if value is None else require_text(value, info.field_name)

    @field_validator("email")
    @classmethod
    def _email(cls, value: str | None) -> str | None:
        return None if value is None else normalize_email(value)

    @field_validator("hire_date")
    @classmethod
    def _hire_date(cls, value: str | None) -> str | None:
        return None if value is None else require_iso_date(value)

    @field_validator("phone", "address")
    @classmethod
    def _optional_text(cls, value: str | None) -> str | None:
        return blank_to_none(value)

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)
