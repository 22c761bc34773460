"""Inbound ports - API contracts offered to the data-access layer."""

from kv_adapter.ports.inbound.collection_adapter import (
    AdapterError,
    CollectionAdapter,
    CollectionDropError,
    CollectionNotFound,
    InvalidCriteriaError,
    InvalidQueryOptionsError,
    MissingCollectionState,
    Options,
)

__all__ = [
    "AdapterError",
    "CollectionAdapter",
    "CollectionDropError",
    "CollectionNotFound",
    "InvalidCriteriaError",
    "InvalidQueryOptionsError",
    "MissingCollectionState",
    "Options",
]
