"""Prometheus metrics for the collection adapter."""

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
    """Registry of all collection adapter metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "kv_adapter_operations_total",
            "Total collection operations",
            ["operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "kv_adapter_operation_latency_seconds",
            "Collection operation latency in seconds",
            ["operation"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        # Row metrics
        self.rows_scanned_total = Counter(
            "kv_adapter_rows_scanned_total",
            "Rows evaluated against criteria",
            ["operation"],  # find, update, destroy
            registry=self._registry,
        )

        self.rows_affected_total = Counter(
            "kv_adapter_rows_affected_total",
            "Rows created, updated or destroyed",
            ["operation"],
            registry=self._registry,
        )

        # Store metrics
        self.store_writes_total = Counter(
            "kv_adapter_store_writes_total",
            "Snapshot writes issued to the key/value store",
            ["kind"],  # schema, data
            registry=self._registry,
        )

        self.collections_defined = Gauge(
            "kv_adapter_collections_defined",
            "Collections with live auto-increment state",
            registry=self._registry,
        )

        self.info = Info(
            "kv_adapter",
            "Collection adapter information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8011, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from kv_adapter import __version__
    _metrics.info.info({"version": __version__})

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
