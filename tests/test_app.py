"""Tests for application wiring: lifespan, bootstrap and the SQL store end to end."""

import logging

import pytest
from fastapi.testclient import TestClient

from task_manager.config import Settings
from task_manager.main import create_app
from task_manager.store import SqlTaskStore


class UnreachableStore:
    """Store whose database never answers."""

    async def bootstrap(self) -> None:
        raise ConnectionRefusedError("connection refused")

    async def close(self) -> None:
        pass

    async def list_tasks(self):
        raise ConnectionRefusedError("connection refused")

    async def create_task(self, title):
        raise ConnectionRefusedError("connection refused")

    async def mark_done(self, task_id):
        raise ConnectionRefusedError("connection refused")

    async def delete_task(self, task_id):
        raise ConnectionRefusedError("connection refused")


@pytest.fixture
def sqlite_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        otel_sdk_disabled=True,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'app.db'}",
    )


def test_lifespan_bootstraps_and_closes_injected_store(settings, store):
    app = create_app(settings=settings, store=store)
    with TestClient(app):
        assert store.bootstrapped
        assert not store.closed
    assert store.closed


def test_lifespan_opens_sql_store_from_settings(sqlite_settings):
    app = create_app(settings=sqlite_settings)
    with TestClient(app):
        assert isinstance(app.state.store, SqlTaskStore)


def test_end_to_end_against_sqlite(sqlite_settings):
    app = create_app(settings=sqlite_settings)
    with TestClient(app) as client:
        assert client.get("/tasks").json() == {"total": 0, "tasks": []}

        first = client.post("/tasks", json={"title": "Task 1"})
        second = client.post("/tasks", json={"title": "Task 2"})
        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["done"] is False

        listed = client.get("/tasks").json()
        assert listed["total"] == 2
        assert [t["title"] for t in listed["tasks"]] == ["Task 1", "Task 2"]

        task_id = first.json()["id"]
        done = client.put(f"/tasks/{task_id}/done")
        assert done.status_code == 200
        assert done.json()["done"] is True

        deleted = client.delete(f"/tasks/{task_id}")
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Task deleted"
        assert deleted.json()["task"]["id"] == task_id
        assert deleted.json()["task"]["done"] is True

        assert client.put(f"/tasks/{task_id}/done").status_code == 404
        assert client.delete("/tasks/abc").status_code == 404
        assert client.get("/tasks").json()["total"] == 1


def test_bootstrap_failure_keeps_serving(settings, caplog):
    app = create_app(settings=settings, store=UnreachableStore())
    with caplog.at_level(logging.ERROR, logger="task_manager.main"):
        with TestClient(app, raise_server_exceptions=False) as client:
            assert client.get("/").status_code == 200
            assert client.get("/tasks").status_code == 500
            assert client.post("/tasks", json={"title": "x"}).status_code == 500

    assert "Database bootstrap failed" in caplog.text


def test_validation_error_skips_unreachable_store(settings):
    app = create_app(settings=settings, store=UnreachableStore())
    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.post("/tasks", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Title is required"}


def test_store_errors_propagate(settings):
    app = create_app(settings=settings, store=UnreachableStore())
    with TestClient(app) as client:
        with pytest.raises(ConnectionRefusedError):
            client.get("/tasks")


def test_info_uses_configured_labels(store):
    settings = Settings(
        _env_file=None,
        otel_sdk_disabled=True,
        app_name="Other API",
        server_label="localhost",
        author="Ops",
    )
    app = create_app(settings=settings, store=store)
    with TestClient(app) as client:
        data = client.get("/").json()
    assert data["app"] == "Other API"
    assert data["server"] == "localhost"
    assert data["author"] == "Ops"
    assert data["database"] == "PostgreSQL"
