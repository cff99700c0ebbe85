"""Live queries and mutations for the desktop client.

Provides:
* ``/live/ws``              – WebSocket: subscribe to named queries, run mutations
* ``/live/stream/{query}``  – SSE stream of snapshots for one named query

WebSocket messages (JSON objects):

client -> server
    {"type": "subscribe", "id": "q1", "query": "tasks.getPending", "args": {}}
    {"type": "unsubscribe", "id": "q1"}
    {"type": "mutation", "id": "m1", "name": "tasks.toggle", "args": {"id": 3}}

server -> client
    {"type": "connected"}
    {"type": "snapshot", "id": "q1", "value": [...]}
    {"type": "result", "id": "m1", "value": ...}
    {"type": "error", "id": "m1", "kind": "TaskNotFound", "message": "Task not found"}
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect, status
from sse_starlette.sse import EventSourceResponse
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.logging import get_logger
from app.db.session import open_session
from app.services.errors import InvalidArgumentError, StaffTrackerError, UnknownOperationError
from app.services.live import ChangeFeed, watch
from app.services.operations import get_query, run_mutation

router = APIRouter(prefix="/live", tags=["live"])
logger = get_logger(__name__)


def _change_feed(app: Any) -> ChangeFeed:
    feed = getattr(app.state, "change_feed", None)
    if feed is None:
        feed = ChangeFeed()
        app.state.change_feed = feed
    return feed


def _error(request_id: Any, exc: StaffTrackerError) -> dict[str, Any]:
    return {"type": "error", "id": request_id, "kind": exc.kind, "message": exc.message}


def _parse_message(raw: str) -> dict[str, Any] | None:
    try:
        message = json.loads(raw)
    except ValueError:
        return None
    return message if isinstance(message, dict) else None


class LiveConnection:
    """Per-socket registry of active subscriptions."""

    def __init__(self, websocket: WebSocket, feed: ChangeFeed) -> None:
        self.websocket = websocket
        self.feed = feed
        self.subscriptions: dict[str, asyncio.Task[None]] = {}
        self._send_lock = asyncio.Lock()

    async def send(self, message: dict[str, Any]) -> None:
        async with self._send_lock:
            await self.websocket.send_json(message)

    def _session_factory(self) -> Session:
        return open_session(self.feed)

    async def subscribe(self, request_id: str, query_name: str, raw_args: Any) -> None:
        query = get_query(query_name)
        args = query.parse(raw_args)
        self.unsubscribe(request_id)

        async def pump() -> None:
            try:
                async for snapshot in watch(
                    query.live_query(),
                    args,
                    feed=self.feed,
                    session_factory=self._session_factory,
                    poll_interval=settings.live_poll_interval_seconds,
                ):
                    await self.send({"type": "snapshot", "id": request_id, "value": snapshot})
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("live.ws.subscription_failed id=%s query=%s", request_id, query_name)
                self.subscriptions.pop(request_id, None)
                try:
                    await self.send(
                        {
                            "type": "error",
                            "id": request_id,
                            "kind": "InternalError",
                            "message": "Subscription failed",
                        }
                    )
                except Exception:
                    logger.info("live.ws.send_failed id=%s", request_id)

        self.subscriptions[request_id] = asyncio.create_task(pump())
        logger.info("live.subscribed id=%s query=%s", request_id, query_name)

    def unsubscribe(self, request_id: str) -> None:
        task = self.subscriptions.pop(request_id, None)
        if task is not None:
            task.cancel()

    async def mutate(self, request_id: str, name: str, raw_args: Any) -> None:
        def run() -> Any:
            with open_session(self.feed) as session:
                return run_mutation(session, name, raw_args)

        value = await run_in_threadpool(run)
        await self.send({"type": "result", "id": request_id, "value": value})

    async def handle(self, message: dict[str, Any]) -> None:
        msg_type = message.get("type")
        request_id = message.get("id")
        try:
            if msg_type in ("subscribe", "unsubscribe", "mutation") and not isinstance(
                request_id, (str, int)
            ):
                raise InvalidArgumentError("id is required")
            if msg_type == "subscribe":
                await self.subscribe(str(request_id), str(message.get("query")), message.get("args"))
            elif msg_type == "unsubscribe":
                self.unsubscribe(str(request_id))
            elif msg_type == "mutation":
                await self.mutate(str(request_id), str(message.get("name")), message.get("args"))
            else:
                raise UnknownOperationError(f"Unknown message type: {msg_type}")
        except StaffTrackerError as exc:
            logger.info("live.ws.failed id=%s kind=%s", request_id, exc.kind)
            await self.send(_error(request_id, exc))

    def close(self) -> None:
        for request_id in list(self.subscriptions):
            self.unsubscribe(request_id)


@router.websocket("/ws")
async def live_websocket(websocket: WebSocket) -> None:
    await websocket.accept()
    connection = LiveConnection(websocket, _change_feed(websocket.app))
    logger.info("live.ws.connected")
    try:
        await connection.send({"type": "connected"})
        while True:
            message = _parse_message(await websocket.receive_text())
            if message is None:
                logger.info("live.ws.malformed_frame")
                await connection.send(
                    _error(None, InvalidArgumentError("message must be a JSON object"))
                )
                continue
            try:
                await connection.handle(message)
            except Exception:
                # One failed call must not take the connection down.
                logger.exception("live.ws.error id=%s", message.get("id"))
                await connection.send(
                    {
                        "type": "error",
                        "id": message.get("id"),
                        "kind": "InternalError",
                        "message": "Internal error",
                    }
                )
    except WebSocketDisconnect:
        logger.info("live.ws.disconnected")
    finally:
        connection.close()
        logger.info("live.ws.closed")


@router.get("/stream/{query_name}")
async def stream_query(query_name: str, request: Request) -> EventSourceResponse:
    """Stream snapshots of one named query as SSE events."""
    try:
        query = get_query(query_name)
        args = query.parse(dict(request.query_params))
    except UnknownOperationError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except StaffTrackerError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.message,
        ) from exc

    feed = _change_feed(request.app)

    async def event_generator():
        async for snapshot in watch(
            query.live_query(),
            args,
            feed=feed,
            session_factory=lambda: open_session(feed),
            poll_interval=settings.live_poll_interval_seconds,
        ):
            if await request.is_disconnected():
                break
            yield {"event": "snapshot", "data": json.dumps(snapshot)}

    return EventSourceResponse(event_generator(), ping=settings.live_ping_seconds)
