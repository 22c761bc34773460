"""Error taxonomy for the collection adapter.

Store errors are raised by key/value store adapters and pass through the
collection operations unmodified. The remaining errors are raised by the
adapter itself.
"""

from __future__ import annotations


class AdapterError(Exception):
    """Base class for every error raised by the adapter."""


class StoreReadError(AdapterError):
    """The underlying key/value store could not be read or loaded."""


class StoreWriteError(AdapterError):
    """The underlying key/value store rejected a set or remove."""


class CollectionNotFound(AdapterError):
    """An operation required a schema that was never defined."""

    def __init__(self, collection: str) -> None:
        super().__init__(f"{collection} does not exist")
        self.collection = collection


class CollectionDropError(AdapterError):
    """Removing a collection's row set failed during drop."""

    def __init__(self, collection: str) -> None:
        super().__init__(f"Could not drop collection {collection}")
        self.collection = collection


class MissingCollectionState(AdapterError):
    """Auto-increment was requested for a collection with no counter."""

    def __init__(self, collection: str) -> None:
        super().__init__(
            f"No auto-increment state for {collection}; define the collection first"
        )
        self.collection = collection


class InvalidCriteriaError(AdapterError):
    """A where clause could not be parsed into a criteria tree."""


class InvalidQueryOptionsError(AdapterError):
    """limit/skip/order could not be interpreted."""
