"""Application layer for the collection adapter.

The application layer wires the domain services to a key/value store and
exposes the collection operations.

Exports:
    CollectionStore: Implementation of the CollectionAdapter port
"""

from kv_adapter.application.collection_store import CollectionStore

__all__ = [
    "CollectionStore",
]
