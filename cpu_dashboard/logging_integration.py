"""Logging setup with optional OpenTelemetry export of logs and spans."""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http import Compression
from opentelemetry.exporter.otlp.proto.http._log_exporter import (
    OTLPLogExporter as HTTPOtLPLogExporter,
)
from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
    OTLPSpanExporter as HTTPOtLPSpanExporter,
)
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler, LogRecordProcessor
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor, LogExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

SERVICE = "cpu-dashboard"
PACKAGE_LOGGER = "cpu_dashboard"
OTLP_ENDPOINT_ENV = "OTEL_EXPORTER_OTLP_ENDPOINT"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
STDERR_HANDLER_NAME = "cpu_dashboard.stderr"


class _StructuredLogFilter(logging.Filter):
    """Convert log records into structured bodies carrying resource metadata."""

    def __init__(self, resource: Resource) -> None:
        super().__init__()
        self._resource_attributes: Dict[str, object] = dict(resource.attributes)

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        formatted_message = record.getMessage()

        structured_body: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "severity_text": record.levelname,
            "logger_name": record.name,
            "message": formatted_message,
        }
        if self._resource_attributes:
            structured_body["resource"] = dict(self._resource_attributes)

        # The OpenTelemetry handler serialises ``msg`` as the record body.
        record.msg = structured_body
        record.args = None
        record.message = formatted_message

        service_name = self._resource_attributes.get(SERVICE_NAME)
        if service_name is not None:
            record.__dict__["service.name"] = service_name
        return True


@dataclass
class LoggingSetup:
    """Container holding OpenTelemetry logging infrastructure."""

    logger_provider: LoggerProvider
    tracer_provider: TracerProvider
    handler: LoggingHandler
    log_processor: LogRecordProcessor
    span_processor: Optional[BatchSpanProcessor]
    resource: Resource
    attached_to_root: bool

    def configure_logger(self, logger: logging.Logger) -> logging.Logger:
        """Attach the OpenTelemetry handler to *logger* and disable propagation."""

        if self.handler not in logger.handlers:
            logger.addHandler(self.handler)
        logger.setLevel(self.handler.level)
        logger.propagate = False
        return logger

    def force_flush(self) -> None:
        self.logger_provider.force_flush()
        self.tracer_provider.force_flush()

    def shutdown(self) -> None:
        self.logger_provider.shutdown()
        self.tracer_provider.shutdown()
        if self.attached_to_root:
            root_logger = logging.getLogger()
            if self.handler in root_logger.handlers:
                root_logger.removeHandler(self.handler)


def create_otlp_log_exporter(
    endpoint: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout: Optional[int] = None,
) -> LogExporter:
    """Factory for an OTLP/HTTP log exporter."""

    return HTTPOtLPLogExporter(
        endpoint=endpoint,
        headers=dict(headers) if headers else None,
        compression=Compression.Gzip,
        timeout=timeout,
    )


def create_otlp_span_exporter(
    endpoint: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout: Optional[int] = None,
) -> SpanExporter:
    """Factory for an OTLP/HTTP span exporter."""

    return HTTPOtLPSpanExporter(
        endpoint=endpoint,
        headers=dict(headers) if headers else None,
        compression=Compression.Gzip,
        timeout=timeout,
    )


def configure_otel_logging(
    *,
    service_name: str = SERVICE,
    otlp_endpoint: Optional[str] = None,
    log_exporter: Optional[LogExporter] = None,
    span_exporter: Optional[SpanExporter] = None,
    log_level: int = logging.INFO,
    attach_to_root: bool = True,
) -> LoggingSetup:
    """Configure OpenTelemetry logging and tracing.

    ``otlp_endpoint`` is the collector base URL; logs go to ``/v1/logs`` and
    spans to ``/v1/traces``. Explicit exporters take precedence.
    """

    if log_exporter is None and otlp_endpoint is None:
        raise ValueError("Either otlp_endpoint or log_exporter must be provided")

    resource = Resource.create({SERVICE_NAME: service_name})
    base = otlp_endpoint.rstrip("/") if otlp_endpoint else None

    logger_provider = LoggerProvider(resource=resource)
    exporter = log_exporter or create_otlp_log_exporter(f"{base}/v1/logs")
    processor = BatchLogRecordProcessor(exporter)
    logger_provider.add_log_record_processor(processor)

    handler = LoggingHandler(level=log_level, logger_provider=logger_provider)
    handler.addFilter(_StructuredLogFilter(resource))

    current_provider = trace.get_tracer_provider()
    if isinstance(current_provider, TracerProvider):
        tracer_provider = current_provider
    else:
        tracer_provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(tracer_provider)

    span_processor: Optional[BatchSpanProcessor] = None
    exporter_span = span_exporter or (
        create_otlp_span_exporter(f"{base}/v1/traces") if base else None
    )
    if exporter_span:
        span_processor = BatchSpanProcessor(exporter_span)
        tracer_provider.add_span_processor(span_processor)

    if attach_to_root:
        root_logger = logging.getLogger()
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
        if root_logger.level > log_level:
            root_logger.setLevel(log_level)

    return LoggingSetup(
        logger_provider=logger_provider,
        tracer_provider=tracer_provider,
        handler=handler,
        log_processor=processor,
        span_processor=span_processor,
        resource=resource,
        attached_to_root=attach_to_root,
    )


def configure_logging(
    level: str | int = logging.INFO,
    env: Optional[Mapping[str, str]] = None,
) -> Optional[LoggingSetup]:
    """Send package logs to stderr, and to an OTLP collector when one is configured.

    Standard output is left untouched for the generated dashboard.
    """

    mapping = env if env is not None else os.environ
    log_level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(log_level)
    if not any(h.get_name() == STDERR_HANDLER_NAME for h in package_logger.handlers):
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.set_name(STDERR_HANDLER_NAME)
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(stream_handler)

    endpoint = mapping.get(OTLP_ENDPOINT_ENV)
    if not endpoint:
        return None
    # Package handlers run before the record propagates to the root handler.
    return configure_otel_logging(otlp_endpoint=endpoint, log_level=log_level)
