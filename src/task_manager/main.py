"""FastAPI application for the Task Manager API."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from task_manager.config import Settings, get_settings
from task_manager.database import create_db_engine
from task_manager.errors import register_error_handlers
from task_manager.middleware import MetricsMiddleware
from task_manager.routes import router
from task_manager.store import SqlTaskStore, TaskStore
from task_manager.telemetry import (
    cleanup_telemetry,
    instrument_engine,
    instrument_fastapi,
    setup_telemetry,
)


logger = logging.getLogger(__name__)


async def bootstrap_store(store: TaskStore) -> None:
    """Create the tasks table once; a failure is logged and never retried."""
    # The broad catch is deliberate: any failure, a broken injected store included,
    # leaves the process serving.
    try:
        await store.bootstrap()
    except Exception:
        logger.exception("Database bootstrap failed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    if app.state.store is None:
        engine = create_db_engine(settings)
        instrument_engine(engine, settings)
        app.state.store = SqlTaskStore(engine)

    await bootstrap_store(app.state.store)

    logger.info("%s running on port %d", settings.app_name, settings.port)
    logger.info("Database: %s", settings.database_label)
    logger.info("Author: %s", settings.author)
    yield

    await app.state.store.close()
    logger.info("Database connections closed")


def create_app(settings: Settings | None = None, store: TaskStore | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use instead of the cached environment settings
        store: TaskStore to serve from; when omitted the lifespan opens a
            SQL store on the configured database

    Returns:
        FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Create, list, complete and delete tasks",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(MetricsMiddleware)
    register_error_handlers(app)
    app.include_router(router)
    instrument_fastapi(app, settings)
    return app


settings = get_settings()
logging.basicConfig(level=settings.log_level)

# Initialize OTel SDK BEFORE app creation
setup_telemetry(settings)

app = create_app(settings)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    try:
        uvicorn.run(app, host=settings.host, port=settings.port)
    finally:
        cleanup_telemetry()
