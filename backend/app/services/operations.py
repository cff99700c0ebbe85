"""Named queries and mutations exposed to live clients.

Names follow the ``<collection>.<operation>`` scheme used by the desktop client
(``employees.getAll``, ``tasks.toggle``...). Arguments arrive as plain JSON
objects and are validated against a per-operation model.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError
from sqlmodel import Session, SQLModel

from app.schemas.org import DepartmentCreate, DepartmentUpdate, EmployeeCreate, EmployeeUpdate
from app.schemas.work import TaskCreate, TaskUpdate
from app.services import departments, employees, tasks
from app.services.errors import InvalidArgumentError, UnknownOperationError
from app.services.live import LiveQuery


class NoArgs(SQLModel):
    pass


class DepartmentFilter(SQLModel):
    department: str


class EmployeeFilter(SQLModel):
    employee_id: int


class RecordRef(SQLModel):
    id: int


class EmployeeUpdateArgs(EmployeeUpdate):
    id: int


class TaskUpdateArgs(TaskUpdate):
    id: int


class DepartmentUpdateArgs(DepartmentUpdate):
    id: int


def parse_args(model: type[SQLModel], raw: Any) -> SQLModel:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise InvalidArgumentError("args must be an object")
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'args'}: {err['msg']}"
            for err in exc.errors()
        )
        raise InvalidArgumentError(details) from None


@dataclass(frozen=True, slots=True)
class QueryOperation:
    name: str
    collections: frozenset[str]
    args_model: type[SQLModel]
    run: Callable[..., list[Any]]

    def live_query(self) -> LiveQuery:
        return LiveQuery(name=self.name, collections=self.collections, run=self.run)

    def parse(self, raw: Any) -> dict[str, Any]:
        return parse_args(self.args_model, raw).model_dump()


@dataclass(frozen=True, slots=True)
class MutationOperation:
    name: str
    args_model: type[SQLModel]
    run: Callable[[Session, Any], Any]


def _query(
    name: str,
    collection: str,
    run: Callable[..., list[Any]],
    args_model: type[SQLModel] = NoArgs,
) -> QueryOperation:
    return QueryOperation(
        name=name, collections=frozenset({collection}), args_model=args_model, run=run
    )


QUERIES: dict[str, QueryOperation] = {
    op.name: op
    for op in (
        _query("employees.getAll", "employees", employees.list_employees),
        _query(
            "employees.getByDepartment",
            "employees",
            employees.list_employees_by_department,
            DepartmentFilter,
        ),
        _query("employees.getActive", "employees", employees.list_active_employees),
        _query("tasks.getAll", "tasks", tasks.list_tasks),
        _query("tasks.getByEmployee", "tasks", tasks.list_tasks_for_employee, EmployeeFilter),
        _query("tasks.getPending", "tasks", tasks.list_pending_tasks),
        _query("departments.getAll", "departments", departments.list_departments),
    )
}


def _add_employee(session: Session, args: EmployeeCreate) -> int | None:
    return employees.create_employee(session, args).id


def _update_employee(session: Session, args: EmployeeUpdateArgs) -> None:
    payload = EmployeeUpdate.model_validate(args.model_dump(exclude={"id"}, exclude_none=True))
    employees.update_employee(session, args.id, payload)


def _remove_employee(session: Session, args: RecordRef) -> None:
    employees.delete_employee(session, args.id)


def _add_task(session: Session, args: TaskCreate) -> int | None:
    return tasks.create_task(session, args).id


def _update_task(session: Session, args: TaskUpdateArgs) -> None:
    payload = TaskUpdate.model_validate(args.model_dump(exclude={"id"}, exclude_none=True))
    tasks.update_task(session, args.id, payload)


def _toggle_task(session: Session, args: RecordRef) -> None:
    tasks.toggle_task(session, args.id)


def _remove_task(session: Session, args: RecordRef) -> None:
    tasks.delete_task(session, args.id)


def _add_department(session: Session, args: DepartmentCreate) -> int | None:
    return departments.create_department(session, args).id


def _update_department(session: Session, args: DepartmentUpdateArgs) -> None:
    payload = DepartmentUpdate.model_validate(args.model_dump(exclude={"id"}, exclude_none=True))
    departments.update_department(session, args.id, payload)


def _remove_department(session: Session, args: RecordRef) -> None:
    departments.delete_department(session, args.id)


MUTATIONS: dict[str, MutationOperation] = {
    op.name: op
    for op in (
        MutationOperation("employees.add", EmployeeCreate, _add_employee),
        MutationOperation("employees.update", EmployeeUpdateArgs, _update_employee),
        MutationOperation("employees.remove", RecordRef, _remove_employee),
        MutationOperation("tasks.add", TaskCreate, _add_task),
        MutationOperation("tasks.update", TaskUpdateArgs, _update_task),
        MutationOperation("tasks.toggle", RecordRef, _toggle_task),
        MutationOperation("tasks.remove", RecordRef, _remove_task),
        MutationOperation("departments.add", DepartmentCreate, _add_department),
        MutationOperation("departments.update", DepartmentUpdateArgs, _update_department),
        MutationOperation("departments.remove", RecordRef, _remove_department),
    )
}


def get_query(name: str) -> QueryOperation:
    try:
        return QUERIES[name]
    except KeyError:
        raise UnknownOperationError(f"Unknown query: {name}") from None


def run_mutation(session: Session, name: str, raw_args: Any) -> Any:
    try:
        operation = MUTATIONS[name]
    except KeyError:
        raise UnknownOperationError(f"Unknown mutation: {name}") from None
    return operation.run(session, parse_args(operation.args_model, raw_args))
