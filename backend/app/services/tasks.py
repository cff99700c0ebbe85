"""Task queries and mutations."""

from __future__ import annotations

from sqlalchemy import not_
from sqlmodel import Session, col, select

from app.core.logging import get_logger
from app.core.time import isoformat_z, utcnow
from app.db import crud
from app.models.work import Task
from app.schemas.work import TaskCreate, TaskUpdate
from app.services.errors import TaskNotFoundError
from app.services.live import record_change

logger = get_logger(__name__)

COLLECTION = "tasks"


def list_tasks(session: Session) -> list[Task]:
    return list(session.exec(select(Task).order_by(col(Task.id).asc())))


def list_tasks_for_employee(session: Session, employee_id: int) -> list[Task]:
    statement = (
        select(Task).where(col(Task.assigned_to) == employee_id).order_by(col(Task.id).asc())
    )
    return list(session.exec(statement))


def list_pending_tasks(session: Session) -> list[Task]:
    statement = select(Task).where(col(Task.is_completed).is_(False)).order_by(col(Task.id).asc())
    return list(session.exec(statement))


def get_task(session: Session, task_id: int) -> Task:
    task = crud.get_by_id(session, Task, task_id)
    if task is None:
        raise TaskNotFoundError()
    return task


def create_task(session: Session, payload: TaskCreate) -> Task:
    task = Task(
        **payload.model_dump(),
        is_completed=False,
        created_at=isoformat_z(utcnow()),
    )
    crud.save(session, task, commit=False)
    record_change(session, COLLECTION, "created", task.id)
    session.commit()
    session.refresh(task)
    logger.info("tasks.created id=%s assigned_to=%s", task.id, task.assigned_to)
    return task


def update_task(session: Session, task_id: int, payload: TaskUpdate) -> Task:
    task = get_task(session, task_id)
    changes = payload.changes()
    if not changes:
        return task

    for key, value in changes.items():
        setattr(task, key, value)
    crud.save(session, task, commit=False)
    record_change(session, COLLECTION, "updated", task.id)
    session.commit()
    session.refresh(task)
    logger.info("tasks.updated id=%s fields=%s", task.id, sorted(changes))
    return task


def toggle_task(session: Session, task_id: int) -> Task:
    """Flip ``is_completed`` in a single UPDATE so concurrent toggles never cancel out."""
    matched = crud.update_where(
        session,
        Task,
        col(Task.id) == task_id,
        commit=False,
        is_completed=not_(col(Task.is_completed)),
    )
    if matched == 0:
        session.rollback()
        raise TaskNotFoundError()
    record_change(session, COLLECTION, "updated", task_id)
    session.commit()

    task = get_task(session, task_id)
    logger.info("tasks.toggled id=%s is_completed=%s", task_id, task.is_completed)
    return task


def delete_task(session: Session, task_id: int) -> bool:
    task = crud.get_by_id(session, Task, task_id)
    if task is None:
        return False
    crud.delete(session, task, commit=False)
    record_change(session, COLLECTION, "deleted", task_id)
    session.commit()
    logger.info("tasks.deleted id=%s", task_id)
    return True
