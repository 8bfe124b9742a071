"""Prometheus metrics for the record store."""

from __future__ import annotations

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)


class MetricsRegistry:
    """Registry of all record store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "recordstore_operations_total",
            "Total number of engine operations",
            ["operation", "status"],  # status: success, not_found, invalid, conflicting_state
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "recordstore_operation_latency_seconds",
            "Engine operation latency in seconds",
            ["operation"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        # Transaction metrics
        self.transactions_total = Counter(
            "recordstore_transactions_total",
            "Total number of finished transactions",
            ["status"],  # commit, rollback
            registry=self._registry,
        )

        self.transactions_active = Gauge(
            "recordstore_transactions_active",
            "Number of open transactions",
            registry=self._registry,
        )

        # Query metrics
        self.index_lookups_total = Counter(
            "recordstore_index_lookups_total",
            "Total index-assisted lookups",
            ["table", "field"],
            registry=self._registry,
        )

        self.full_scans_total = Counter(
            "recordstore_full_scans_total",
            "Total full table scans",
            ["table"],
            registry=self._registry,
        )

        # Persistence metrics
        self.snapshots_saved_total = Counter(
            "recordstore_snapshots_saved_total",
            "Total snapshots handed to the snapshot store",
            registry=self._registry,
        )

        self.persistence_failures_total = Counter(
            "recordstore_persistence_failures_total",
            "Total snapshot saves rejected by the snapshot store",
            registry=self._registry,
        )

        self.snapshot_size_bytes = Gauge(
            "recordstore_snapshot_size_bytes",
            "Size of the last snapshot written",
            registry=self._registry,
        )

        # Server info
        self.info = Info(
            "recordstore",
            "Record store information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    target = registry or REGISTRY
    # Collectors can only be registered once per registry.
    if _metrics is None or _metrics._registry is not target:
        _metrics = MetricsRegistry(target)

    from recordstore import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=target)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
