"""Outbound ports - interfaces for external dependencies.

The adapter depends on a single external system: the embedded key/value
store that holds schemas and row sets.
"""

from kv_adapter.ports.outbound.key_value_store import (
    KeyValueStore,
    LoadListener,
    StoreReadError,
    StoreWriteError,
)

__all__ = [
    "KeyValueStore",
    "LoadListener",
    "StoreReadError",
    "StoreWriteError",
]
