import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class TaskCreate(BaseModel):
    # Any JSON value: falsy ones (0, false, "", null) are rejected by the handler
    title: Any = None

    def title_text(self) -> str:
        """Title as stored; non-string values keep their JSON spelling (5 -> "5", true -> "true")."""
        if isinstance(self.title, str):
            return self.title
        return json.dumps(self.title)


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    done: bool
    created_at: datetime


class TaskList(BaseModel):
    total: int
    tasks: list[TaskOut]


class TaskDeleted(BaseModel):
    message: str = "Task deleted"
    task: TaskOut


class ServiceInfo(BaseModel):
    app: str
    database: str
    server: str
    author: str
    endpoints: dict[str, str]


class ErrorOut(BaseModel):
    error: str
