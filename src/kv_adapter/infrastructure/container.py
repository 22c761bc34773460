"""Dependency injection container."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from prometheus_client import CollectorRegistry

from kv_adapter.infrastructure.config import Config, get_config

T = TypeVar("T")


class Container:
    """
    Simple dependency injection container.

    Supports singleton and factory registrations with lazy initialization.
    """

    def __init__(self) -> None:
        """Initialize the container."""
        self._singletons: dict[type, Any] = {}
        self._factories: dict[type, Callable[[Container], Any]] = {}
        self._instances: dict[type, Any] = {}

    def register_singleton(self, interface: type[T], instance: T) -> None:
        """Register an already-built instance for an interface."""
        self._singletons[interface] = instance
        self._instances[interface] = instance

    def register_factory(
        self,
        interface: type[T],
        factory: Callable[[Container], T],
    ) -> None:
        """
        Register a factory function for lazy instantiation.

        Args:
            interface: The interface/type to register
            factory: Factory function that takes the container and returns an instance
        """
        self._factories[interface] = factory

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a dependency, building it on first use.

        Raises:
            KeyError: If no registration exists for the interface
        """
        if interface in self._instances:
            return self._instances[interface]

        if interface in self._factories:
            instance = self._factories[interface](self)
            self._instances[interface] = instance
            return instance

        raise KeyError(f"No registration found for {interface}")

    def has(self, interface: type) -> bool:
        """Check if an interface is registered."""
        return interface in self._singletons or interface in self._factories

    def clear(self) -> None:
        """Clear all registrations and instances."""
        self._singletons.clear()
        self._factories.clear()
        self._instances.clear()


def build_container(
    config: Config | None = None,
    registry: CollectorRegistry | None = None,
) -> Container:
    """Register the adapter's components.

    The key/value store is chosen from ``config.adapter.persistent``. The
    CollectionStore is built lazily and is not initialized; callers invoke
    ``initialize()`` themselves.

    Args:
        config: Configuration. Uses ``get_config()`` if None.
        registry: Prometheus registry for the metrics. Uses the default if None.
    """
    from kv_adapter.adapters.outbound import FileKeyValueStore, InMemoryKeyValueStore
    from kv_adapter.application import CollectionStore
    from kv_adapter.infrastructure.metrics import MetricsRegistry, get_metrics
    from kv_adapter.ports.outbound import KeyValueStore

    config = config or get_config()
    container = Container()
    container.register_singleton(Config, config)

    def _store(c: Container) -> KeyValueStore:
        adapter = c.resolve(Config).adapter
        if adapter.persistent:
            adapter.ensure_directories()
            return FileKeyValueStore(adapter.db_file_path)
        return InMemoryKeyValueStore()

    container.register_factory(KeyValueStore, _store)
    container.register_factory(
        MetricsRegistry,
        lambda c: MetricsRegistry(registry) if registry is not None else get_metrics(),
    )
    container.register_factory(
        CollectionStore,
        lambda c: CollectionStore(
            config=c.resolve(Config).adapter,
            store=c.resolve(KeyValueStore),
            metrics=c.resolve(MetricsRegistry),
        ),
    )
    return container


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get the global container, building it from the global config."""
    global _container
    if _container is None:
        _container = build_container()
    return _container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    if _container is not None:
        _container.clear()
    _container = None
