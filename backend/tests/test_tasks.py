from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError
from sqlmodel import Session

from app.db.session import open_session
from app.schemas.org import EmployeeCreate
from app.schemas.work import TaskCreate, TaskUpdate
from app.services import employees, tasks
from app.services.errors import TaskNotFoundError
from app.services.live import ChangeEvent, ChangeFeed


def test_create_task_sets_server_fields(session: Session) -> None:
    before = datetime.now(UTC)
    task = tasks.create_task(session, TaskCreate(text="Write onboarding doc"))
    after = datetime.now(UTC)

    assert task.is_completed is False
    assert task.assigned_to is None
    assert task.due_date is None
    assert task.created_at.endswith("Z")
    created_at = datetime.fromisoformat(task.created_at.replace("Z", "+00:00"))
    assert before - timedelta(milliseconds=1) <= created_at <= after


def test_create_ignores_caller_supplied_server_fields(session: Session) -> None:
    payload = TaskCreate.model_validate(
        {"text": "Ship it", "is_completed": True, "created_at": "1999-01-01T00:00:00.000Z"}
    )
    task = tasks.create_task(session, payload)

    assert task.is_completed is False
    assert not task.created_at.startswith("1999")


def test_review_pr_scenario(session: Session, ada: dict[str, object]) -> None:
    employee = employees.create_employee(session, EmployeeCreate.model_validate(ada))
    task = tasks.create_task(session, TaskCreate(text="Review PR", assigned_to=employee.id))
    assert task.is_completed is False

    assert [t.id for t in tasks.list_tasks_for_employee(session, employee.id)] == [task.id]

    assert tasks.toggle_task(session, task.id).is_completed is True
    assert tasks.toggle_task(session, task.id).is_completed is False


def test_toggle_unknown_task_fails(session: Session) -> None:
    with pytest.raises(TaskNotFoundError) as excinfo:
        tasks.toggle_task(session, 12345)
    assert excinfo.value.kind == "TaskNotFound"
    assert str(excinfo.value) == "Task not found"


def test_pending_lists_only_incomplete_tasks(session: Session) -> None:
    open_task = tasks.create_task(session, TaskCreate(text="Open"))
    done_task = tasks.create_task(session, TaskCreate(text="Done"))
    tasks.toggle_task(session, done_task.id)

    assert [t.id for t in tasks.list_pending_tasks(session)] == [open_task.id]
    assert [t.id for t in tasks.list_tasks(session)] == [open_task.id, done_task.id]


def test_update_replaces_given_fields_only(session: Session) -> None:
    task = tasks.create_task(session, TaskCreate(text="Draft", due_date="2026-11-01"))

    updated = tasks.update_task(
        session,
        task.id,
        TaskUpdate.model_validate({"text": "Final", "assigned_to": 7, "due_date": None}),
    )

    assert updated.text == "Final"
    assert updated.assigned_to == 7
    assert updated.due_date == "2026-11-01"
    assert updated.created_at == task.created_at


def test_update_can_set_completion(session: Session) -> None:
    task = tasks.create_task(session, TaskCreate(text="Draft"))
    assert tasks.update_task(session, task.id, TaskUpdate(is_completed=True)).is_completed is True
    assert tasks.list_pending_tasks(session) == []


def test_update_unknown_task_fails(session: Session) -> None:
    with pytest.raises(TaskNotFoundError):
        tasks.update_task(session, 99, TaskUpdate(text="Nope"))


def test_delete_is_idempotent(session: Session) -> None:
    task = tasks.create_task(session, TaskCreate(text="Temporary"))

    assert tasks.delete_task(session, task.id) is True
    assert tasks.list_tasks(session) == []
    assert tasks.delete_task(session, task.id) is False


def test_task_assigned_to_unknown_employee_is_accepted(session: Session) -> None:
    task = tasks.create_task(session, TaskCreate(text="Orphan", assigned_to=999))
    assert [t.id for t in tasks.list_tasks_for_employee(session, 999)] == [task.id]


@pytest.mark.parametrize(
    "fields",
    [
        {"text": ""},
        {"text": "   "},
        {"text": "Plan", "due_date": "next week"},
    ],
)
def test_create_payload_validation(fields: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        TaskCreate.model_validate(fields)


def test_due_date_accepts_date_and_datetime() -> None:
    assert TaskCreate(text="a", due_date="2026-12-24").due_date == "2026-12-24"
    assert TaskCreate(text="b", due_date="2026-12-24T17:00:00Z").due_date == "2026-12-24T17:00:00Z"
    assert TaskCreate(text="c", due_date="").due_date is None


def test_concurrent_toggles_never_lose_a_flip(feed: ChangeFeed) -> None:
    with open_session(feed) as session:
        task_id = tasks.create_task(session, TaskCreate(text="Contended")).id

    published: list[ChangeEvent] = []
    feed.publish = published.append  # type: ignore[method-assign]
    workers = 7
    barrier = threading.Barrier(workers)

    def flip() -> None:
        barrier.wait()
        with open_session(feed) as worker_session:
            tasks.toggle_task(worker_session, task_id)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        for future in [pool.submit(flip) for _ in range(workers)]:
            future.result()

    with open_session(feed) as session:
        assert tasks.get_task(session, task_id).is_completed is True
    assert published == [ChangeEvent("tasks", "updated", task_id)] * workers
