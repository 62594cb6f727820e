"""Tracing, Prometheus series and structlog configuration for the booking API."""

import logging

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from .config import settings

SERVICE_NAME = "travel-booking-api"
SERVICE_VERSION = "1.0.0"

# Dedicated registry so tests and reloads never collide with the default one
REGISTRY = CollectorRegistry()

REQUEST_COUNT = Counter(
    "http_requests_total",
    "HTTP requests served, by route template",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
)
REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "Time spent serving HTTP requests",
    ["method", "endpoint"],
    registry=REGISTRY,
)

BOOKINGS_SUBMITTED = Counter(
    "bookings_submitted_total",
    "Public booking submissions accepted",
    ["new_account"],
    registry=REGISTRY,
)
BOOKINGS_CONFIRMED = Counter(
    "bookings_confirmed_total",
    "Bookings moved from temporary to confirmed",
    registry=REGISTRY,
)
BOOKINGS_CANCELLED = Counter(
    "bookings_cancelled_total",
    "Bookings cancelled, by the role that cancelled them",
    ["cancelled_by"],
    registry=REGISTRY,
)
BOOKING_STATUS_CHANGES = Counter(
    "booking_status_changes_total",
    "Administrative status patches that changed a booking",
    ["from_status", "to_status"],
    registry=REGISTRY,
)
TRAVELERS_PROVISIONED = Counter(
    "travelers_provisioned_total",
    "Traveler accounts created implicitly by a submission",
    registry=REGISTRY,
)
NOTIFICATION_FAILURES = Counter(
    "notification_failures_total",
    "Traveler emails that could not be delivered",
    ["kind"],
    registry=REGISTRY,
)


def _add_trace_ids(logger, method_name, event_dict):
    span = trace.get_current_span()
    if span.is_recording():
        span_context = span.get_span_context()
        event_dict["trace_id"] = f"{span_context.trace_id:032x}"
        event_dict["span_id"] = f"{span_context.span_id:016x}"
    return event_dict


def setup_structured_logging():
    """Configure structlog: request context, trace ids, JSON outside development."""
    renderer = structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_trace_ids,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.log_level)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _service_resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": SERVICE_VERSION,
        "deployment.environment": settings.environment,
    })


def setup_tracing():
    """
    Install a tracer provider.

    Spans are exported over OTLP only when ``OTLP_ENDPOINT`` is set;
    otherwise they exist only to stamp trace ids onto log lines.
    """
    provider = TracerProvider(resource=_service_resource())
    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))
    trace.set_tracer_provider(provider)
    return trace.get_tracer(SERVICE_NAME)


def setup_metrics():
    """Push OpenTelemetry metrics over OTLP when configured. Prometheus scraping needs nothing."""
    if settings.otlp_endpoint:
        reader = PeriodicExportingMetricReader(
            exporter=OTLPMetricExporter(endpoint=settings.otlp_endpoint),
            export_interval_millis=60_000,
        )
        metrics.set_meter_provider(MeterProvider(resource=_service_resource(), metric_readers=[reader]))
    return metrics.get_meter(SERVICE_NAME)


def instrument_fastapi(app):
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Trace queries issued through an async engine."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Booking lifecycle counters, called from the workflow after each commit."""

    @staticmethod
    def record_booking_submitted(new_account: bool):
        BOOKINGS_SUBMITTED.labels(new_account="true" if new_account else "false").inc()

    @staticmethod
    def record_traveler_provisioned():
        TRAVELERS_PROVISIONED.inc()

    @staticmethod
    def record_booking_confirmed():
        BOOKINGS_CONFIRMED.inc()

    @staticmethod
    def record_booking_cancelled(cancelled_by: str):
        BOOKINGS_CANCELLED.labels(cancelled_by=cancelled_by).inc()

    @staticmethod
    def record_status_change(from_status: str, to_status: str):
        BOOKING_STATUS_CHANGES.labels(from_status=from_status, to_status=to_status).inc()

    @staticmethod
    def record_notification_failure(kind: str):
        NOTIFICATION_FAILURES.labels(kind=kind).inc()


metrics_collector = MetricsCollector()


def get_prometheus_metrics() -> bytes:
    """Render every series in the service registry in text exposition format."""
    return generate_latest(REGISTRY)


def get_logger(name: str, **context):
    """Return a structlog logger, bound to ``context`` when given."""
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger
