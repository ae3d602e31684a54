"""Observability setup for the Task Manager API.

Configures OpenTelemetry traces and metrics exported to Base14 Scout over
OTLP/HTTP, plus auto-instrumentation:

- FastAPI: one span per HTTP request
- SQLAlchemy: one span per query, attached to the request span
- logging: trace_id and span_id added to every log record

Call ``setup_telemetry`` BEFORE creating the FastAPI app.
"""

import logging
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from sqlalchemy.ext.asyncio import AsyncEngine

from task_manager.config import Settings


logger = logging.getLogger(__name__)


def setup_telemetry(settings: Settings) -> tuple[trace.Tracer, metrics.Meter]:
    """Initialize trace and meter providers.

    Args:
        settings: Application settings (service name, OTLP endpoint, environment)

    Returns:
        Tuple of (tracer, meter) for custom instrumentation
    """
    service_name = settings.otel_service_name

    if settings.otel_sdk_disabled:
        logger.info("OpenTelemetry disabled")
        return trace.get_tracer(service_name), metrics.get_meter(service_name)

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": "1.0.0",
            "deployment.environment": settings.scout_environment,
        }
    )

    # Traces
    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(endpoint=f"{settings.otel_exporter_otlp_endpoint}/v1/traces")
        )
    )
    trace.set_tracer_provider(trace_provider)

    # Metrics
    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=f"{settings.otel_exporter_otlp_endpoint}/v1/metrics"),
        export_interval_millis=10000,
    )
    metric_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(metric_provider)

    LoggingInstrumentor().instrument(set_logging_format=True)

    logger.info(
        "OpenTelemetry initialized",
        extra={"service": service_name, "endpoint": settings.otel_exporter_otlp_endpoint},
    )

    return trace.get_tracer(service_name), metrics.get_meter(service_name)


def instrument_fastapi(app: Any, settings: Settings) -> None:
    """Instrument FastAPI app after creation."""
    if settings.otel_sdk_disabled:
        return

    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    FastAPIInstrumentor.instrument_app(app, exclude_spans=["receive", "send"])


def instrument_engine(engine: AsyncEngine, settings: Settings) -> None:
    """Trace every query issued through the engine."""
    if settings.otel_sdk_disabled:
        return

    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    SQLAlchemyInstrumentor().instrument(
        engine=engine.sync_engine,
        enable_commenter=True,
        commenter_options={"db_driver": True, "db_framework": True},
    )


def cleanup_telemetry() -> None:
    """Flush and shut down telemetry providers."""
    tracer_provider = trace.get_tracer_provider()
    if hasattr(tracer_provider, "shutdown"):
        logger.info("Shutting down OpenTelemetry tracer provider")
        tracer_provider.shutdown()

    meter_provider = metrics.get_meter_provider()
    if hasattr(meter_provider, "shutdown"):
        logger.info("Shutting down OpenTelemetry meter provider")
        meter_provider.shutdown()
