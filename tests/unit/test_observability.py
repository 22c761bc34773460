"""Unit tests for logging and tracing helpers."""

from __future__ import annotations

import json

import pytest
import structlog

from kv_adapter.infrastructure.config import ObservabilityConfig
from kv_adapter.infrastructure.logging import collection_context, get_logger, setup_logging
from kv_adapter.infrastructure.tracing import get_tracer, trace_span


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.mark.unit
class TestLogging:
    """Tests for the structlog setup."""

    def test_json_entries_carry_context(self, reset_structlog, capsys) -> None:
        setup_logging(ObservabilityConfig(log_format="json", log_level="DEBUG"))
        log = get_logger("test", component="tests")

        with collection_context("Users", "find"):
            log.info("rows_found", matched=2)

        entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert entry["event"] == "rows_found"
        assert entry["service"] == "kv_adapter"
        assert entry["collection"] == "Users"
        assert entry["operation"] == "find"
        assert entry["component"] == "tests"
        assert entry["level"] == "info"

    def test_level_filtering(self, reset_structlog, capsys) -> None:
        setup_logging(ObservabilityConfig(log_format="json", log_level="WARNING"))

        get_logger("test").info("hidden")

        assert "hidden" not in capsys.readouterr().out


@pytest.mark.unit
class TestTracing:
    """Tests for trace_span."""

    def test_span_yields(self) -> None:
        with trace_span("kv.find", {"kv.collection": "Users"}) as span:
            assert span is not None

    def test_get_tracer_cached(self) -> None:
        assert get_tracer() is get_tracer()
