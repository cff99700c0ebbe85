from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from fastapi import Request
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings
from app.core.logging import get_logger
from app.services.live import CHANGE_FEED_KEY, ChangeFeed

logger = get_logger(__name__)


def _engine_kwargs(url: str) -> dict[str, Any]:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url in {"sqlite://", "sqlite:///:memory:"}:
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(settings.database_url, echo=settings.db_echo, **_engine_kwargs(settings.database_url))


def init_db() -> None:
    # Registers the table models on SQLModel.metadata.
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("db.ready url=%s", engine.url.render_as_string(hide_password=True))


def open_session(feed: ChangeFeed | None = None) -> Session:
    """New session whose committed changes are published to ``feed``."""
    return Session(engine, info={CHANGE_FEED_KEY: feed})


def get_session(request: Request) -> Iterator[Session]:
    feed = getattr(request.app.state, "change_feed", None)
    with open_session(feed) as session:
        yield session
