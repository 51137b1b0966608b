from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from revalpro.api.declarations import router as declarations_router
from revalpro.api.export import router as export_router
from revalpro.api.health import router as health_router
from revalpro.api.metrics_endpoint import router as metrics_router
from revalpro.api.progress import router as progress_router
from revalpro.api.records import (
    cpd_router,
    feedback_router,
    practice_hours_router,
    reflections_router,
)
from revalpro.api.reminders import router as reminders_router
from revalpro.api.weekly_hours import router as weekly_hours_router
from revalpro.core.config import SETTINGS
from revalpro.core.logging import setup_logging
from revalpro.db.redis import lifespan_redis, redis_pool
from revalpro.middleware.metrics import MetricsMiddleware
from revalpro.middleware.request_context import RequestContextMiddleware
from revalpro.repos.record_repo import RecordRepo
from revalpro.services.kv_store import KeyValueStore, build_kv_store
from revalpro.services.reminders import ReminderService

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_redis():
        yield


def create_app(store: KeyValueStore | None = None) -> FastAPI:
    """Build the API around ``store`` (Redis when configured, else in-memory)."""
    if store is None:
        store = build_kv_store(redis_pool)

    app = FastAPI(
        title="revalpro",
        lifespan=lifespan,
        docs_url="/docs" if SETTINGS.is_dev else None,
        redoc_url="/redoc" if SETTINGS.is_dev else None,
    )
    app.state.record_repo = RecordRepo(store)
    app.state.reminder_service = ReminderService(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Last-added runs first: RequestContext → Metrics → CORS → route handler
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(practice_hours_router)
    app.include_router(cpd_router)
    app.include_router(feedback_router)
    app.include_router(reflections_router)
    app.include_router(declarations_router)
    app.include_router(weekly_hours_router)
    app.include_router(progress_router)
    app.include_router(export_router)
    app.include_router(reminders_router)

    logger.info(
        "revalpro started  env=%s log_level=%s port=%d store=%s",
        SETTINGS.app_env,
        SETTINGS.log_level,
        SETTINGS.port,
        type(store).__name__,
    )
    return app


app = create_app()
