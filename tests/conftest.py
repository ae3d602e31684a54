"""Pytest fixtures for Task Manager API testing."""

import os


# Set env vars before importing anything from the app
os.environ["OTEL_SDK_DISABLED"] = "true"

from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from task_manager.config import Settings
from task_manager.main import create_app
from task_manager.schemas import TaskOut
from task_manager.store import SqlTaskStore, parse_task_id


class InMemoryTaskStore:
    """TaskStore keeping rows in a dict, ids from a counter that never rewinds."""

    def __init__(self) -> None:
        self.rows: dict[int, TaskOut] = {}
        self._ids = count(1)
        self.bootstrapped = False
        self.closed = False

    async def bootstrap(self) -> None:
        self.bootstrapped = True

    async def close(self) -> None:
        self.closed = True

    async def list_tasks(self) -> list[TaskOut]:
        return [self.rows[task_id] for task_id in sorted(self.rows)]

    async def create_task(self, title: str) -> TaskOut:
        task = TaskOut(
            id=next(self._ids), title=title, done=False, created_at=datetime.now(UTC)
        )
        self.rows[task.id] = task
        return task

    async def mark_done(self, task_id: str) -> TaskOut | None:
        key = parse_task_id(task_id)
        if key not in self.rows:
            return None
        self.rows[key] = self.rows[key].model_copy(update={"done": True})
        return self.rows[key]

    async def delete_task(self, task_id: str) -> TaskOut | None:
        return self.rows.pop(parse_task_id(task_id), None)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, otel_sdk_disabled=True)


@pytest.fixture
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def client(settings: Settings, store: InMemoryTaskStore) -> Iterator[TestClient]:
    app = create_app(settings=settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def sqlite_engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    """File-backed SQLite engine so every pooled connection sees the same tables."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}")
    yield engine
    await engine.dispose()


@pytest.fixture
async def sql_store(sqlite_engine: AsyncEngine) -> SqlTaskStore:
    store = SqlTaskStore(sqlite_engine)
    await store.bootstrap()
    return store
