"""In-process change feed backing live queries.

Mutations queue a :class:`ChangeEvent` on their session with
:func:`record_change`. The events are published to the session's
:class:`ChangeFeed` only after the transaction commits; a rollback drops them.

Subscribers register interest in one or more collections and are woken up
(coalesced, thread-safe) whenever one of them changes. :func:`watch` turns a
subscription plus a query into a stream of snapshots.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import event
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from app.core.logging import get_logger

logger = get_logger(__name__)

CHANGE_FEED_KEY = "change_feed"
_PENDING_KEY = "pending_changes"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    collection: str  # employees | departments | tasks
    verb: str  # created | updated | deleted
    record_id: int | None = None


class Subscription:
    """Interest in a set of collections, bound to the event loop that created it."""

    def __init__(
        self,
        feed: ChangeFeed,
        collections: frozenset[str],
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._feed = feed
        self.collections = collections
        self._loop = loop
        self._dirty = asyncio.Event()
        self.closed = False

    def matches(self, change: ChangeEvent) -> bool:
        return change.collection in self.collections

    def _notify(self) -> None:
        self._loop.call_soon_threadsafe(self._dirty.set)

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait for a change. Returns False when ``timeout`` elapsed first."""
        try:
            if timeout is None:
                await self._dirty.wait()
            else:
                await asyncio.wait_for(self._dirty.wait(), timeout)
        except TimeoutError:
            return False
        self._dirty.clear()
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._feed._discard(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ChangeFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: set[Subscription] = set()

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, collections: Iterable[str]) -> Subscription:
        """Register interest; must be called from inside a running event loop."""
        subscription = Subscription(self, frozenset(collections), asyncio.get_running_loop())
        with self._lock:
            self._subscriptions.add(subscription)
        return subscription

    def _discard(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions.discard(subscription)

    def publish(self, change: ChangeEvent) -> None:
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(change)]
        logger.debug(
            "live.publish collection=%s verb=%s id=%s subscribers=%s",
            change.collection,
            change.verb,
            change.record_id,
            len(targets),
        )
        for subscription in targets:
            try:
                subscription._notify()
            except RuntimeError:
                # Event loop already closed; the subscriber is gone.
                logger.debug("live.publish.stale_subscription collections=%s", sorted(subscription.collections))
                subscription.close()


def record_change(session: Session, collection: str, verb: str, record_id: int | None) -> None:
    """Queue a change to be published once ``session`` commits."""
    session.info.setdefault(_PENDING_KEY, []).append(ChangeEvent(collection, verb, record_id))


@event.listens_for(Session, "after_commit")
def _publish_pending(session: Session) -> None:
    pending: list[ChangeEvent] = session.info.pop(_PENDING_KEY, [])
    feed: ChangeFeed | None = session.info.get(CHANGE_FEED_KEY)
    if feed is None:
        return
    for change in pending:
        feed.publish(change)


@event.listens_for(Session, "after_rollback")
def _discard_pending(session: Session) -> None:
    session.info.pop(_PENDING_KEY, None)


@dataclass(frozen=True, slots=True)
class LiveQuery:
    name: str
    collections: frozenset[str]
    run: Callable[..., list[Any]]


def _snapshot(rows: list[Any]) -> list[Any]:
    return [row.model_dump(mode="json") if hasattr(row, "model_dump") else row for row in rows]


async def watch(
    query: LiveQuery,
    args: dict[str, Any],
    *,
    feed: ChangeFeed,
    session_factory: Callable[[], Session],
    poll_interval: float | None = None,
) -> AsyncIterator[list[Any]]:
    """Yield the query result now and again every time it changes.

    The subscription is registered before the first evaluation so no change
    can slip in between. ``poll_interval`` re-evaluates even without a
    notification (changes made by other processes sharing the database).
    """

    def evaluate() -> list[Any]:
        with session_factory() as session:
            return _snapshot(query.run(session, **args))

    with feed.subscribe(query.collections) as subscription:
        last: list[Any] | None = None
        while True:
            current = await run_in_threadpool(evaluate)
            if current != last:
                last = current
                yield current
            await subscription.wait(poll_interval)
