from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from app.core.logging import get_logger
from app.db import crud
from app.models.org import Department
from app.schemas.org import DepartmentCreate, DepartmentUpdate
from app.services.errors import DepartmentNotFoundError, DuplicateDepartmentError
from app.services.live import record_change

logger = get_logger(__name__)

COLLECTION = "departments"


def list_departments(session: Session) -> list[Department]:
    return list(session.exec(select(Department).order_by(col(Department.name).asc())))


def get_department(session: Session, department_id: int) -> Department:
    department = crud.get_by_id(session, Department, department_id)
    if department is None:
        raise DepartmentNotFoundError()
    return department


def _ensure_name_free(session: Session, name: str, *, exclude_id: int | None = None) -> None:
    existing = session.exec(select(Department).where(col(Department.name) == name)).first()
    if existing is not None and existing.id != exclude_id:
        raise DuplicateDepartmentError()


def create_department(session: Session, payload: DepartmentCreate) -> Department:
    _ensure_name_free(session, payload.name)
    department = Department(**payload.model_dump())
    try:
        crud.save(session, department, commit=False)
        record_change(session, COLLECTION, "created", department.id)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise DuplicateDepartmentError() from None
    session.refresh(department)
    logger.info("departments.created id=%s name=%s", department.id, department.name)
    return department


def update_department(
    session: Session, department_id: int, payload: DepartmentUpdate
) -> Department:
    department = get_department(session, department_id)
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        return department
    if "name" in changes:
        _ensure_name_free(session, str(changes["name"]), exclude_id=department.id)

    for key, value in changes.items():
        setattr(department, key, value)
    try:
        crud.save(session, department, commit=False)
        record_change(session, COLLECTION, "updated", department.id)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise DuplicateDepartmentError() from None
    session.refresh(department)
    logger.info("departments.updated id=%s fields=%s", department.id, sorted(changes))
    return department


def delete_department(session: Session, department_id: int) -> bool:
    department = crud.get_by_id(session, Department, department_id)
    if department is None:
        return False
    crud.delete(session, department, commit=False)
    record_change(session, COLLECTION, "deleted", department_id)
    session.commit()
    logger.info("departments.deleted id=%s", department_id)
    return True
