"""Unit tests for logging, metrics and tracing setup."""

from __future__ import annotations

import io
import json

import pytest
import structlog
from prometheus_client import CollectorRegistry

from recordstore.infrastructure import metrics as metrics_module
from recordstore.infrastructure.logging import get_logger, setup_logging
from recordstore.infrastructure.metrics import MetricsRegistry, setup_metrics
from recordstore.infrastructure.tracing import get_tracer, trace_span


@pytest.mark.unit
class TestLogging:
    """Tests for structlog configuration."""

    @pytest.fixture(autouse=True)
    def _reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_json_output(self) -> None:
        """JSON logs carry the event and bound context."""
        stream = io.StringIO()
        setup_logging(level="INFO", log_format="json", stream=stream)

        get_logger("test", database="inventory").info("table_created", table="items")

        event = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert event["event"] == "table_created"
        assert event["database"] == "inventory"
        assert event["table"] == "items"
        assert event["level"] == "info"

    def test_level_filtering(self) -> None:
        """Events below the level are dropped."""
        stream = io.StringIO()
        setup_logging(level="WARNING", log_format="json", stream=stream)

        get_logger("test").info("ignored")

        assert stream.getvalue() == ""


@pytest.mark.unit
class TestMetrics:
    """Tests for the metrics registry."""

    def test_counters_registered(self, metrics_registry: MetricsRegistry) -> None:
        """Counters land in the given registry."""
        metrics_registry.operations_total.labels(operation="insert", status="success").inc()

        registry = metrics_registry._registry
        assert registry.get_sample_value(
            "recordstore_operations_total", {"operation": "insert", "status": "success"}
        ) == 1.0

    def test_setup_metrics_starts_server(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """setup_metrics serves the registry and publishes info."""
        started = {}

        def fake_start(port: int, registry: CollectorRegistry) -> None:
            started["port"] = port
            started["registry"] = registry

        monkeypatch.setattr(metrics_module, "start_http_server", fake_start)
        monkeypatch.setattr(metrics_module, "_metrics", None)
        registry = CollectorRegistry()

        metrics = setup_metrics(port=9109, registry=registry)

        assert started == {"port": 9109, "registry": registry}
        assert metrics_module.get_metrics() is metrics
        assert registry.get_sample_value("recordstore_info", {"version": "0.1.0"}) == 1.0

    def test_setup_metrics_reuses_registry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A second setup on the same registry keeps the existing collectors."""
        monkeypatch.setattr(metrics_module, "start_http_server", lambda port, registry: None)
        registry = CollectorRegistry()
        existing = MetricsRegistry(registry)
        monkeypatch.setattr(metrics_module, "_metrics", existing)

        assert setup_metrics(port=9110, registry=registry) is existing
        assert setup_metrics(port=9111, registry=registry) is existing

        other = setup_metrics(port=9112, registry=CollectorRegistry())
        assert other is not existing
        assert metrics_module.get_metrics() is other


@pytest.mark.unit
class TestTracing:
    """Tests for tracing helpers."""

    def test_trace_span_sets_attributes(self) -> None:
        """trace_span yields a usable span."""
        with trace_span("recordstore.test", {"table": "users"}) as span:
            assert span is not None

    def test_get_tracer_is_cached(self) -> None:
        """The tracer is created once."""
        assert get_tracer() is get_tracer()
