from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from task_manager.config import Settings
from task_manager.errors import TaskNotFoundError, TitleRequiredError
from task_manager.schemas import ErrorOut, ServiceInfo, TaskCreate, TaskDeleted, TaskList, TaskOut
from task_manager.store import TaskStore


ENDPOINTS = {
    "GET /": "This info",
    "GET /tasks": "List all tasks",
    "POST /tasks": "Create a task (send {title: 'your task'})",
    "PUT /tasks/:id/done": "Mark task as done",
    "DELETE /tasks/:id": "Delete a task",
}

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorOut}}


def get_store(request: Request) -> TaskStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


StoreDep = Annotated[TaskStore, Depends(get_store)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]


@router.get("/", response_model=ServiceInfo)
async def service_info(settings: SettingsDep) -> ServiceInfo:
    return ServiceInfo(
        app=settings.app_name,
        database=settings.database_label,
        server=settings.server_label,
        author=settings.author,
        endpoints=ENDPOINTS,
    )


@router.get("/tasks", response_model=TaskList)
async def list_tasks(store: StoreDep) -> TaskList:
    tasks = await store.list_tasks()
    return TaskList(total=len(tasks), tasks=tasks)


@router.post(
    "/tasks",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorOut}},
)
async def create_task(store: StoreDep, task: TaskCreate | None = None) -> TaskOut:
    if task is None or not task.title:
        raise TitleRequiredError()
    return await store.create_task(task.title_text())


@router.put("/tasks/{task_id}/done", response_model=TaskOut, responses=NOT_FOUND)
async def mark_task_done(task_id: str, store: StoreDep) -> TaskOut:
    task = await store.mark_done(task_id)
    if task is None:
        raise TaskNotFoundError()
    return task


@router.delete("/tasks/{task_id}", response_model=TaskDeleted, responses=NOT_FOUND)
async def delete_task(task_id: str, store: StoreDep) -> TaskDeleted:
    task = await store.delete_task(task_id)
    if task is None:
        raise TaskNotFoundError()
    return TaskDeleted(task=task)
