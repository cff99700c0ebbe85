from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from app.db.session import get_session
from app.models.work import Task
from app.schemas.common import CreatedResponse, OkResponse
from app.schemas.work import TaskCreate, TaskUpdate
from app.services import tasks as tasks_service
from app.services.errors import TaskNotFoundError

router = APIRouter(prefix="/tasks", tags=["tasks"])

SESSION_DEP = Depends(get_session)


@router.get("", response_model=list[Task])
def list_tasks(
    employee_id: int | None = Query(default=None),
    session: Session = SESSION_DEP,
) -> list[Task]:
    if employee_id is not None:
        return tasks_service.list_tasks_for_employee(session, employee_id)
    return tasks_service.list_tasks(session)


@router.get("/pending", response_model=list[Task])
def list_pending_tasks(session: Session = SESSION_DEP) -> list[Task]:
    return tasks_service.list_pending_tasks(session)


@router.get("/{task_id}", response_model=Task)
def get_task(task_id: int, session: Session = SESSION_DEP) -> Task:
    try:
        return tasks_service.get_task(session, task_id)
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc


@router.post("", response_model=CreatedResponse)
def create_task(payload: TaskCreate, session: Session = SESSION_DEP) -> CreatedResponse:
    task = tasks_service.create_task(session, payload)
    return CreatedResponse(id=task.id)


@router.patch("/{task_id}", response_model=Task)
def update_task(task_id: int, payload: TaskUpdate, session: Session = SESSION_DEP) -> Task:
    try:
        return tasks_service.update_task(session, task_id, payload)
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc


@router.post("/{task_id}/toggle", response_model=Task)
def toggle_task(task_id: int, session: Session = SESSION_DEP) -> Task:
    """Flip the completion flag."""
    try:
        return tasks_service.toggle_task(session, task_id)
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc


@router.delete("/{task_id}", response_model=OkResponse)
def delete_task(task_id: int, session: Session = SESSION_DEP) -> OkResponse:
    tasks_service.delete_task(session, task_id)
    return OkResponse()
