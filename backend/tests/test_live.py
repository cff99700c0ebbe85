from __future__ import annotations

import asyncio

import pytest
from sqlmodel import Session

from app.db.session import open_session
from app.schemas.org import EmployeeCreate
from app.schemas.work import TaskCreate
from app.services import employees, tasks
from app.services.errors import InvalidArgumentError, TaskNotFoundError, UnknownOperationError
from app.services.live import ChangeEvent, ChangeFeed, record_change, watch
from app.services.operations import QUERIES, get_query, run_mutation


def test_commit_notifies_matching_subscribers(feed: ChangeFeed, session: Session) -> None:
    async def scenario() -> tuple[bool, bool]:
        with feed.subscribe(["tasks"]) as task_sub, feed.subscribe(["employees"]) as employee_sub:
            tasks.create_task(session, TaskCreate(text="Notify me"))
            return await task_sub.wait(1.0), await employee_sub.wait(0.05)

    task_changed, employee_changed = asyncio.run(scenario())

    assert task_changed is True
    assert employee_changed is False
    assert len(feed) == 0


def test_rollback_discards_pending_changes(feed: ChangeFeed, session: Session) -> None:
    seen: list[ChangeEvent] = []
    feed.publish = seen.append  # type: ignore[method-assign]

    tasks.list_tasks(session)  # opens the transaction
    record_change(session, "tasks", "created", 1)
    session.rollback()
    session.commit()

    assert seen == []


def test_changes_are_published_after_commit(feed: ChangeFeed, session: Session) -> None:
    seen: list[ChangeEvent] = []
    feed.publish = seen.append  # type: ignore[method-assign]

    task = tasks.create_task(session, TaskCreate(text="First"))
    tasks.toggle_task(session, task.id)
    tasks.delete_task(session, task.id)
    tasks.delete_task(session, task.id)

    assert seen == [
        ChangeEvent("tasks", "created", task.id),
        ChangeEvent("tasks", "updated", task.id),
        ChangeEvent("tasks", "deleted", task.id),
    ]


def test_failed_toggle_publishes_nothing(feed: ChangeFeed, session: Session) -> None:
    seen: list[ChangeEvent] = []
    feed.publish = seen.append  # type: ignore[method-assign]

    with pytest.raises(TaskNotFoundError):
        tasks.toggle_task(session, 5)

    assert seen == []


def test_watch_emits_initial_and_changed_snapshots(feed: ChangeFeed) -> None:
    query = QUERIES["tasks.getPending"].live_query()

    async def scenario() -> list[list[dict]]:
        snapshots: list[list[dict]] = []
        stream = watch(
            query,
            {},
            feed=feed,
            session_factory=lambda: open_session(feed),
            poll_interval=5.0,
        )
        snapshots.append(await anext(stream))

        with open_session(feed) as session:
            created = tasks.create_task(session, TaskCreate(text="Review PR"))
        snapshots.append(await asyncio.wait_for(anext(stream), 5.0))

        with open_session(feed) as session:
            tasks.toggle_task(session, created.id)
        snapshots.append(await asyncio.wait_for(anext(stream), 5.0))

        await stream.aclose()
        return snapshots

    initial, after_create, after_toggle = asyncio.run(scenario())

    assert initial == []
    assert [t["text"] for t in after_create] == ["Review PR"]
    assert after_create[0]["is_completed"] is False
    assert after_toggle == []
    assert len(feed) == 0


def test_watch_filters_by_arguments(feed: ChangeFeed, ada: dict[str, object]) -> None:
    with open_session(feed) as session:
        employee = employees.create_employee(session, EmployeeCreate.model_validate(ada))
        employee_id = employee.id
        tasks.create_task(session, TaskCreate(text="Mine", assigned_to=employee_id))
        tasks.create_task(session, TaskCreate(text="Someone else's"))

    query = get_query("tasks.getByEmployee")
    args = query.parse({"employee_id": employee_id})

    async def scenario() -> list[dict]:
        stream = watch(query.live_query(), args, feed=feed, session_factory=lambda: open_session(feed))
        try:
            return await anext(stream)
        finally:
            await stream.aclose()

    snapshot = asyncio.run(scenario())
    assert [t["text"] for t in snapshot] == ["Mine"]


def test_query_registry_covers_contract() -> None:
    assert set(QUERIES) == {
        "employees.getAll",
        "employees.getByDepartment",
        "employees.getActive",
        "tasks.getAll",
        "tasks.getByEmployee",
        "tasks.getPending",
        "departments.getAll",
    }


def test_unknown_operations_are_rejected(session: Session) -> None:
    with pytest.raises(UnknownOperationError):
        get_query("employees.getEverything")
    with pytest.raises(UnknownOperationError):
        run_mutation(session, "employees.promote", {"id": 1})


def test_malformed_arguments_are_rejected(session: Session) -> None:
    with pytest.raises(InvalidArgumentError):
        get_query("employees.getByDepartment").parse({})
    with pytest.raises(InvalidArgumentError):
        run_mutation(session, "tasks.toggle", {"id": "seven"})
    with pytest.raises(InvalidArgumentError):
        run_mutation(session, "tasks.add", ["not", "an", "object"])


def test_mutations_by_name(session: Session, ada: dict[str, object]) -> None:
    employee_id = run_mutation(session, "employees.add", ada)
    assert isinstance(employee_id, int)

    run_mutation(session, "employees.update", {"id": employee_id, "position": "CTO", "phone": None})
    assert employees.get_employee(session, employee_id).position == "CTO"

    task_id = run_mutation(session, "tasks.add", {"text": "Review PR", "assigned_to": employee_id})
    run_mutation(session, "tasks.toggle", {"id": task_id})
    assert tasks.get_task(session, task_id).is_completed is True

    run_mutation(session, "tasks.remove", {"id": task_id})
    run_mutation(session, "employees.remove", {"id": employee_id})
    assert tasks.list_tasks(session) == []
    assert employees.list_employees(session) == []
