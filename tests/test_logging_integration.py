import logging
from unittest.mock import Mock

import pytest
from opentelemetry.sdk._logs.export import InMemoryLogExporter
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from cpu_dashboard.dashboards import build_cpu_dashboard
from cpu_dashboard.grafana import GrafanaClient
from cpu_dashboard.logging_integration import (
    STDERR_HANDLER_NAME,
    configure_logging,
    configure_otel_logging,
    create_otlp_log_exporter,
    create_otlp_span_exporter,
)


@pytest.fixture
def client_logger():
    logger = logging.getLogger("cpu_dashboard.grafana.client")
    handlers, propagate, level = list(logger.handlers), logger.propagate, logger.level
    yield logger
    logger.handlers = handlers
    logger.propagate = propagate
    logger.setLevel(level)


def test_publish_emits_logs_and_span(client_logger):
    log_exporter = InMemoryLogExporter()
    span_exporter = InMemorySpanExporter()
    setup = configure_otel_logging(
        service_name="cpu-dashboard-test",
        log_exporter=log_exporter,
        span_exporter=span_exporter,
        attach_to_root=False,
    )
    setup.configure_logger(client_logger)

    session = Mock()
    session.post.side_effect = [
        Mock(status_code=200, text="{}"),
        Mock(status_code=500, text="boom"),
        ConnectionError("Connection refused"),
    ]
    client = GrafanaClient("http://grafana:3000", "admin", "admin", session=session)
    for _ in range(3):
        client.publish(build_cpu_dashboard())

    setup.force_flush()

    # One INFO per attempt plus a WARNING for each failure.
    assert len(log_exporter.get_finished_logs()) == 5
    spans = [span for span in span_exporter.get_finished_spans() if span.name == "grafana.publish"]
    assert len(spans) == 3
    ok, rejected, unreachable = spans
    assert ok.attributes["http.url"] == "http://grafana:3000/api/dashboards/db"
    assert ok.attributes["http.status_code"] == 200
    assert ok.status.status_code is StatusCode.UNSET
    assert rejected.attributes["http.status_code"] == 500
    assert rejected.status.status_code is StatusCode.ERROR
    assert unreachable.status.status_code is StatusCode.ERROR
    assert [event.name for event in unreachable.events] == ["exception"]
    assert setup.resource.attributes["service.name"] == "cpu-dashboard-test"

    setup.shutdown()


def test_configure_otel_logging_requires_a_destination():
    with pytest.raises(ValueError):
        configure_otel_logging(attach_to_root=False)


def test_configure_logging_without_collector():
    package_logger = logging.getLogger("cpu_dashboard")
    try:
        assert configure_logging("debug", env={}) is None
        assert configure_logging(logging.INFO, env={}) is None
        names = [handler.get_name() for handler in package_logger.handlers]
        assert names.count(STDERR_HANDLER_NAME) == 1
        assert package_logger.level == logging.INFO
    finally:
        package_logger.handlers.clear()


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        configure_logging("chatty", env={})


def test_exporter_factories_configure_endpoints():
    log_exporter = create_otlp_log_exporter("http://collector:4318/v1/logs")
    span_exporter = create_otlp_span_exporter("http://collector:4318/v1/traces")

    assert getattr(log_exporter, "_endpoint") == "http://collector:4318/v1/logs"
    assert getattr(span_exporter, "_endpoint") == "http://collector:4318/v1/traces"
