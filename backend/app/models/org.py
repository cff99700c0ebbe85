from __future__ import annotations

from sqlmodel import Field, SQLModel


class Department(SQLModel, table=True):
    __tablename__ = "departments"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    description: str | None = None

    # Weak reference to employees.id: no constraint, no cascade.
    manager_id: int | None = Field(default=None, index=True)


class Employee(SQLModel, table=True):
    __tablename__ = "employees"

    id: int | None = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str = Field(index=True, unique=True)

    # Free text; filtered by exact match.
    department: str = Field(index=True)
    position: str
    salary: float
    hire_date: str

    status: str = Field(default="active", index=True)  # active | inactive | terminated

    phone: str | None = None
    address: str | None = None
