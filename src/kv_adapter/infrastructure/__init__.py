"""Infrastructure layer - cross-cutting concerns."""

from kv_adapter.infrastructure.config import AdapterConfig, Config, ObservabilityConfig, get_config
from kv_adapter.infrastructure.logging import get_logger, setup_logging
from kv_adapter.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from kv_adapter.infrastructure.tracing import get_tracer, setup_tracing, trace_span

__all__ = [
    "AdapterConfig",
    "Config",
    "ObservabilityConfig",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
