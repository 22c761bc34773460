"""Outbound adapters - implementations of the key/value store port."""

from kv_adapter.adapters.outbound.file_store import FileKeyValueStore
from kv_adapter.adapters.outbound.memory_store import InMemoryKeyValueStore

__all__ = [
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
]
