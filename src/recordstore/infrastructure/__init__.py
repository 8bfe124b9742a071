"""Infrastructure layer - cross-cutting concerns."""

from recordstore.infrastructure.config import Config, get_config
from recordstore.infrastructure.logging import get_logger, setup_logging, setup_logging_from_config
from recordstore.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from recordstore.infrastructure.tracing import get_tracer, setup_tracing, trace_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
