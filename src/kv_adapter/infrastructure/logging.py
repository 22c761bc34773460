"""Structured logging configuration for the collection adapter."""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from kv_adapter.infrastructure.config import ObservabilityConfig


def add_adapter_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every entry with the emitting service."""
    event_dict.setdefault("service", "kv_adapter")
    return event_dict


def setup_logging(config: ObservabilityConfig | None = None) -> None:
    """Configure structlog from the observability settings.

    Args:
        config: Observability section; defaults are used when omitted.
    """
    config = config or ObservabilityConfig()
    level = getattr(logging, config.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_adapter_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if config.log_format == "json":
        # Row values may hold datetimes
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Return a structlog logger, optionally bound to initial context."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def collection_context(collection: str, operation: str) -> AbstractContextManager[Any]:
    """Bind collection/operation to every log entry emitted inside the block."""
    return structlog.contextvars.bound_contextvars(
        collection=collection, operation=operation
    )
