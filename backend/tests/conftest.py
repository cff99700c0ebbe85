from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

# Settings are read at import time, so point them at a scratch database first.
_DB_DIR = Path(tempfile.mkdtemp(prefix="staff-tracker-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.sqlite3'}"
os.environ["LIVE_POLL_INTERVAL_SECONDS"] = "0.5"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

import app.models  # noqa: F401
from app.db.session import engine, open_session
from app.main import create_app
from app.services.live import ChangeFeed


@pytest.fixture(autouse=True)
def _fresh_schema() -> Iterator[None]:
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture()
def feed() -> ChangeFeed:
    return ChangeFeed()


@pytest.fixture()
def session(feed: ChangeFeed) -> Iterator[Session]:
    with open_session(feed) as session:
        yield session


@pytest.fixture()
def client() -> Iterator[TestClient]:
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def ada() -> dict[str, object]:
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@x.com",
        "department": "Engineering",
        "position": "Engineer",
        "salary": 90000,
        "hire_date": "2020-01-01",
    }


@pytest.fixture()
def grace() -> dict[str, object]:
    return {
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": "grace@x.com",
        "department": "Operations",
        "position": "Admiral",
        "salary": 120000,
        "hire_date": "2019-06-15",
        "phone": "555-0100",
    }
