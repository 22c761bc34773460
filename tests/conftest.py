"""Pytest configuration and fixtures for kv_adapter tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest
from prometheus_client import CollectorRegistry

from kv_adapter.adapters.outbound import InMemoryKeyValueStore
from kv_adapter.application import CollectionStore
from kv_adapter.domain.errors import StoreWriteError
from kv_adapter.infrastructure.config import AdapterConfig, Config
from kv_adapter.infrastructure.container import Container, reset_container
from kv_adapter.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def adapter_config() -> AdapterConfig:
    """In-memory adapter configuration."""
    return AdapterConfig()


@pytest.fixture
def persistent_config(temp_dir: Path) -> Config:
    """Configuration writing to a data file under a temporary directory."""
    return Config(
        adapter=AdapterConfig(
            persistent=True,
            db_file_path=temp_dir / "db" / "collections.db",
        )
    )


@pytest.fixture
def container() -> Generator[Container, None, None]:
    """Provide a fresh DI container for each test."""
    reset_container()
    c = Container()
    yield c
    c.clear()


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Separate registry to avoid duplicate timeseries between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def collection_store(
    adapter_config: AdapterConfig, metrics_registry: MetricsRegistry
) -> Generator[CollectionStore, None, None]:
    """An initialized in-memory CollectionStore."""
    store = CollectionStore(config=adapter_config, metrics=metrics_registry)
    store.initialize()
    yield store
    store.teardown()


@pytest.fixture
def users_schema() -> dict[str, Any]:
    """Schema with an auto-increment id and both timestamps."""
    return {
        "id": {"type": "integer", "autoIncrement": True},
        "name": {"type": "string"},
        "age": {"type": "integer"},
        "createdAt": True,
        "updatedAt": True,
    }


class FlakyKeyValueStore(InMemoryKeyValueStore):
    """In-memory store whose writes can be made to fail per key prefix."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_set_prefixes: set[str] = set()
        self.fail_remove_prefixes: set[str] = set()

    def set(self, key: str, value: Any) -> None:
        if any(key.startswith(p) for p in self.fail_set_prefixes):
            raise StoreWriteError(f"injected set failure for {key}")
        super().set(key, value)

    def remove(self, key: str) -> None:
        if any(key.startswith(p) for p in self.fail_remove_prefixes):
            raise StoreWriteError(f"injected remove failure for {key}")
        super().remove(key)


@pytest.fixture
def flaky_store() -> FlakyKeyValueStore:
    """A store with injectable write failures."""
    return FlakyKeyValueStore()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
