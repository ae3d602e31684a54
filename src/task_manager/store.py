"""Task storage: one parameterized statement per operation."""

import logging
import re
from typing import Protocol

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncEngine

from task_manager.database import close_db, init_db
from task_manager.models import tasks_table
from task_manager.schemas import TaskOut


logger = logging.getLogger(__name__)

# Range of the Postgres INTEGER column behind tasks.id
_MIN_ID = -(2**31)
_MAX_ID = 2**31 - 1

# What Postgres accepts as INTEGER input; int() alone would also take non-ASCII digits
_INTEGER_RE = re.compile(r"\s*[+-]?[0-9]+\s*", re.ASCII)


class TaskStore(Protocol):
    """Storage interface the HTTP handlers depend on."""

    async def bootstrap(self) -> None: ...

    async def close(self) -> None: ...

    async def list_tasks(self) -> list[TaskOut]: ...

    async def create_task(self, title: str) -> TaskOut: ...

    async def mark_done(self, task_id: str) -> TaskOut | None: ...

    async def delete_task(self, task_id: str) -> TaskOut | None: ...


def parse_task_id(task_id: str) -> int | None:
    """Convert a path id to a column value, or None when no row could match it."""
    if not _INTEGER_RE.fullmatch(task_id):
        return None
    value = int(task_id)
    if not _MIN_ID <= value <= _MAX_ID:
        return None
    return value


def _to_task(row: Row) -> TaskOut:
    return TaskOut.model_validate(dict(row._mapping))


class SqlTaskStore:
    """TaskStore backed by a SQLAlchemy async engine.

    Every method checks one connection out of the engine's pool, runs a single
    statement and gives the connection back, on success or on error.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def bootstrap(self) -> None:
        await init_db(self.engine)
        logger.info("Database table ready!")

    async def close(self) -> None:
        await close_db(self.engine)

    async def list_tasks(self) -> list[TaskOut]:
        async with self.engine.connect() as conn:
            result = await conn.execute(select(tasks_table).order_by(tasks_table.c.id))
            return [_to_task(row) for row in result]

    async def create_task(self, title: str) -> TaskOut:
        stmt = insert(tasks_table).values(title=title).returning(*tasks_table.c)
        async with self.engine.begin() as conn:
            result = await conn.execute(stmt)
            return _to_task(result.one())

    async def mark_done(self, task_id: str) -> TaskOut | None:
        value = parse_task_id(task_id)
        if value is None:
            return None
        stmt = (
            update(tasks_table)
            .where(tasks_table.c.id == value)
            .values(done=True)
            .returning(*tasks_table.c)
        )
        async with self.engine.begin() as conn:
            row = (await conn.execute(stmt)).one_or_none()
        return _to_task(row) if row is not None else None

    async def delete_task(self, task_id: str) -> TaskOut | None:
        value = parse_task_id(task_id)
        if value is None:
            return None
        stmt = delete(tasks_table).where(tasks_table.c.id == value).returning(*tasks_table.c)
        async with self.engine.begin() as conn:
            row = (await conn.execute(stmt)).one_or_none()
        return _to_task(row) if row is not None else None
