from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from app.db.session import get_session
from app.models.org import Department, Employee
from app.schemas.common import CreatedResponse, OkResponse
from app.schemas.org import (
    DEPARTMENT_OPTIONS,
    DepartmentCreate,
    DepartmentUpdate,
    EmployeeCreate,
    EmployeeUpdate,
)
from app.services import departments as departments_service
from app.services import employees as employees_service
from app.services.errors import (
    DepartmentNotFoundError,
    DuplicateDepartmentError,
    DuplicateEmailError,
    EmployeeNotFoundError,
)

router = APIRouter(tags=["org"])

SESSION_DEP = Depends(get_session)


@router.get("/departments", response_model=list[Department])
def list_departments(session: Session = SESSION_DEP) -> list[Department]:
    return departments_service.list_departments(session)


@router.post("/departments", response_model=Department)
def create_department(payload: DepartmentCreate, session: Session = SESSION_DEP) -> Department:
    try:
        return departments_service.create_department(session, payload)
    except DuplicateDepartmentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc


@router.get("/departments/{department_id}", response_model=Department)
def get_department(department_id: int, session: Session = SESSION_DEP) -> Department:
    try:
        return departments_service.get_department(session, department_id)
    except DepartmentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc


@router.patch("/departments/{department_id}", response_model=Department)
def update_department(
    department_id: int,
    payload: DepartmentUpdate,
    session: Session = SESSION_DEP,
) -> Department:
    try:
        return departments_service.update_department(session, department_id, payload)
    except DepartmentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except DuplicateDepartmentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc


@router.delete("/departments/{department_id}", response_model=OkResponse)
def delete_department(department_id: int, session: Session = SESSION_DEP) -> OkResponse:
    departments_service.delete_department(session, department_id)
    return OkResponse()


@router.get("/employees", response_model=list[Employee])
def list_employees(
    department: str | None = Query(default=None),
    session: Session = SESSION_DEP,
) -> list[Employee]:
    if department is not None:
        return employees_service.list_employees_by_department(session, department)
    return employees_service.list_employees(session)


@router.get("/employees/active", response_model=list[Employee])
def list_active_employees(session: Session = SESSION_DEP) -> list[Employee]:
    return employees_service.list_active_employees(session)


@router.get("/employees/department-options", response_model=list[str])
def list_department_options() -> list[str]:
    """Department names offered by the employee form."""
    return list(DEPARTMENT_OPTIONS)


@router.get("/employees/{employee_id}", response_model=Employee)
def get_employee(employee_id: int, session: Session = SESSION_DEP) -> Employee:
    try:
        return employees_service.get_employee(session, employee_id)
    except EmployeeNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc


@router.post("/employees", response_model=CreatedResponse)
def create_employee(payload: EmployeeCreate, session: Session = SESSION_DEP) -> CreatedResponse:
    try:
        employee = employees_service.create_employee(session, payload)
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    return CreatedResponse(id=employee.id)


@router.patch("/employees/{employee_id}", response_model=Employee)
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    session: Session = SESSION_DEP,
) -> Employee:
    try:
        return employees_service.update_employee(session, employee_id, payload)
    except EmployeeNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc


@router.delete("/employees/{employee_id}", response_model=OkResponse)
def delete_employee(employee_id: int, session: Session = SESSION_DEP) -> OkResponse:
    """Delete an employee. Unknown ids succeed; assigned tasks are kept."""
    employees_service.delete_employee(session, employee_id)
    return OkResponse()
