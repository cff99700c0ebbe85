from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.live import router as live_router
from app.api.org import router as org_router
from app.api.tasks import router as tasks_router
from app.core.config import settings
from app.core.logging import configure_logging, get_logger
from app.db.session import init_db
from app.schemas.common import OkResponse
from app.services.live import ChangeFeed

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.change_feed = ChangeFeed()
    if settings.db_auto_create:
        init_db()
    logger.info("app.started environment=%s", settings.environment)
    yield
    logger.info("app.stopped subscriptions=%s", len(app.state.change_feed))


def create_app() -> FastAPI:
    app = FastAPI(title="Staff Tracker", version="0.1.0", lifespan=lifespan)
    if settings.cors_origin_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origin_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(org_router)
    api_v1.include_router(tasks_router)
    api_v1.include_router(live_router)
    app.include_router(api_v1)

    @app.get("/healthz", response_model=OkResponse)
    def healthz() -> OkResponse:
        return OkResponse()

    return app


app = create_app()


def run() -> None:
    import uvicorn

    configure_logging(settings.log_level)
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
