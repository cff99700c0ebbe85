"""Small synchronous helpers shared by the service modules."""

from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy import update
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, SQLModel

ModelT = TypeVar("ModelT", bound=SQLModel)


def get_by_id(session: Session, model: type[ModelT], obj_id: Any) -> ModelT | None:
    return session.get(model, obj_id)


def save(session: Session, obj: ModelT, *, commit: bool = True) -> ModelT:
    session.add(obj)
    session.flush()
    if commit:
        session.commit()
        session.refresh(obj)
    return obj


def delete(session: Session, obj: SQLModel, *, commit: bool = True) -> None:
    session.delete(obj)
    if commit:
        session.commit()


def update_where(
    session: Session,
    model: type[SQLModel],
    *conditions: ColumnElement[bool],
    commit: bool = True,
    **values: Any,
) -> int:
    """Run one UPDATE statement and return the number of matched rows."""
    statement = (
        update(model)
        .where(*conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(statement)
    if commit:
        session.commit()
    return int(result.rowcount or 0)
