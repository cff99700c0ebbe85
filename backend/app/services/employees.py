"""Employee queries and mutations."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from app.core.logging import get_logger
from app.db import crud
from app.models.org import Employee
from app.schemas.org import EmployeeCreate, EmployeeUpdate
from app.services.errors import DuplicateEmailError, EmployeeNotFoundError
from app.services.live import record_change

logger = get_logger(__name__)

COLLECTION = "employees"


def list_employees(session: Session) -> list[Employee]:
    return list(session.exec(select(Employee).order_by(col(Employee.id).asc())))


def list_employees_by_department(session: Session, department: str) -> list[Employee]:
    statement = (
        select(Employee)
        .where(col(Employee.department) == department)
        .order_by(col(Employee.id).asc())
    )
    return list(session.exec(statement))


def list_active_employees(session: Session) -> list[Employee]:
    statement = (
        select(Employee)
        .where(col(Employee.status) == "active")
        .order_by(col(Employee.id).asc())
    )
    return list(session.exec(statement))


def get_employee(session: Session, employee_id: int) -> Employee:
    employee = crud.get_by_id(session, Employee, employee_id)
    if employee is None:
        raise EmployeeNotFoundError()
    return employee


def find_by_email(session: Session, email: str) -> Employee | None:
    return session.exec(select(Employee).where(col(Employee.email) == email)).first()


def _ensure_email_free(session: Session, email: str, *, exclude_id: int | None = None) -> None:
    existing = find_by_email(session, email)
    if existing is not None and existing.id != exclude_id:
        logger.info("employees.email_taken email=%s owner_id=%s", email, existing.id)
        raise DuplicateEmailError()


def create_employee(session: Session, payload: EmployeeCreate) -> Employee:
    """Insert a new employee. Status always starts as ``active``."""
    _ensure_email_free(session, payload.email)

    employee = Employee(**payload.model_dump(), status="active")
    try:
        crud.save(session, employee, commit=False)
        record_change(session, COLLECTION, "created", employee.id)
        session.commit()
    except IntegrityError:
        # Lost the race against a concurrent insert with the same email.
        session.rollback()
        raise DuplicateEmailError() from None

    session.refresh(employee)
    logger.info("employees.created id=%s department=%s", employee.id, employee.department)
    return employee


def update_employee(session: Session, employee_id: int, payload: EmployeeUpdate) -> Employee:
    employee = get_employee(session, employee_id)
    changes = payload.changes()
    if not changes:
        return employee

    if "email" in changes:
        _ensure_email_free(session, str(changes["email"]), exclude_id=employee.id)

    for key, value in changes.items():
        setattr(employee, key, value)

    try:
        crud.save(session, employee, commit=False)
        record_change(session, COLLECTION, "updated", employee.id)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise DuplicateEmailError() from None

    session.refresh(employee)
    logger.info("employees.updated id=%s fields=%s", employee.id, sorted(changes))
    return employee


def delete_employee(session: Session, employee_id: int) -> bool:
    """Remove an employee. Missing ids are not an error; returns whether a row went away.

    Tasks assigned to the employee are left as they are.
    """
    employee = crud.get_by_id(session, Employee, employee_id)
    if employee is None:
        return False
    crud.delete(session, employee, commit=False)
    record_change(session, COLLECTION, "deleted", employee_id)
    session.commit()
    logger.info("employees.deleted id=%s", employee_id)
    return True
