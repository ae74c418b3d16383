"""Tracing and JSON logging for the service, plus per-run log correlation."""

from __future__ import annotations

import contextvars
import logging
from dataclasses import dataclass, replace

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger.json import JsonFormatter

from src.config.settings import Settings, get_settings


@dataclass(frozen=True)
class LogCorrelation:
    run_id: str = ""
    step_name: str = ""
    section: str = ""


_correlation: contextvars.ContextVar[LogCorrelation] = contextvars.ContextVar(
    "log_correlation", default=LogCorrelation()
)


def set_correlation_context(
    *,
    run_id: str | None = None,
    step_name: str | None = None,
    section: str | None = None,
) -> None:
    """Change the given correlation fields for the current task; ``None`` keeps a field."""
    changes = {
        key: value
        for key, value in (("run_id", run_id), ("step_name", step_name), ("section", section))
        if value is not None
    }
    _correlation.set(replace(_correlation.get(), **changes))


def get_correlation_context() -> LogCorrelation:
    return _correlation.get()


class CorrelationFilter(logging.Filter):
    """Copies the current run, step and section onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _correlation.get()
        record.run_id = ctx.run_id  # type: ignore[attr-defined]
        record.step_name = ctx.step_name  # type: ignore[attr-defined]
        record.section = ctx.section  # type: ignore[attr-defined]
        return True


def _tracer_provider(settings: Settings) -> TracerProvider:
    # service.name also feeds the "service" field of every log line.
    attributes = {SERVICE_NAME: settings.OTEL_SERVICE_NAME}
    if settings.APP_COMMIT_SHA:
        attributes[SERVICE_VERSION] = settings.APP_COMMIT_SHA
    provider = TracerProvider(resource=Resource.create(attributes))
    if settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider


def _json_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s "
            "%(otelTraceID)s %(otelSpanID)s %(otelServiceName)s "
            "%(run_id)s %(step_name)s %(section)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "otelTraceID": "trace_id",
                "otelSpanID": "span_id",
                "otelServiceName": "service",
            },
        )
    )
    handler.addFilter(CorrelationFilter())
    return handler


_configured = False


def configure_telemetry(settings: Settings | None = None) -> None:
    """Install the tracer provider and the JSON root handler. Runs once per process."""
    global _configured
    if _configured:
        return
    _configured = True

    settings = settings or get_settings()
    trace.set_tracer_provider(_tracer_provider(settings))
    LoggingInstrumentor().instrument(set_logging_format=False)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_json_handler())
    root.setLevel(settings.LOG_LEVEL.upper())
