"""Ports layer - interface definitions following Hexagonal Architecture.

- Inbound ports: the collection operations offered to callers
- Outbound ports: the key/value store the adapter persists into
"""

from kv_adapter.ports.inbound import CollectionAdapter
from kv_adapter.ports.outbound import KeyValueStore, StoreReadError, StoreWriteError

__all__ = [
    # Inbound ports
    "CollectionAdapter",
    # Outbound ports
    "KeyValueStore",
    "StoreReadError",
    "StoreWriteError",
]
