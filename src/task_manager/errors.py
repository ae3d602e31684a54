"""Error types and handlers with OpenTelemetry trace context."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.trace import StatusCode


logger = logging.getLogger(__name__)


class TaskManagerError(Exception):
    """Expected client error with a fixed message and HTTP status."""

    status_code = 400
    message = "Bad request"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class TitleRequiredError(TaskManagerError):
    status_code = 400
    message = "Title is required"


class TaskNotFoundError(TaskManagerError):
    status_code = 404
    message = "Task not found"


def error_response(message: str, status_code: int) -> JSONResponse:
    """Create an ``{"error": message}`` response.

    The active trace id, if any, goes in the ``X-Trace-Id`` header so the
    body keeps its exact shape.

    Args:
        message: Error message.
        status_code: HTTP status code.

    Returns:
        JSON response.
    """
    headers = {}
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        headers["X-Trace-Id"] = format(span_context.trace_id, "032x")

    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _record_error_on_span(exc: Exception) -> None:
    span = trace.get_current_span()
    if span.is_recording():
        span.record_exception(exc)
        span.set_attribute("error.type", type(exc).__name__)
        span.set_status(StatusCode.ERROR, str(exc))


async def task_manager_error_handler(request: Request, exc: TaskManagerError) -> JSONResponse:
    _record_error_on_span(exc)
    logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return error_response(exc.message, exc.status_code)


def register_error_handlers(app: FastAPI) -> None:
    """Register error handlers on the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(TaskManagerError, task_manager_error_handler)
