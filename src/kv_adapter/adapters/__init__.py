"""Adapters layer - concrete implementations of port interfaces.

Outbound adapters provide the key/value stores the collection operations
persist into: an in-memory store for development and tests, and an
append-only file store for persistent mode.
"""

from kv_adapter.adapters.outbound import FileKeyValueStore, InMemoryKeyValueStore

__all__ = [
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
]
