"""Collection adapter port.

This inbound port is the operation surface a data-access layer drives:
collection lifecycle (define/describe/alter/drop) and row operations
(create/find/update/destroy).

Query options for find/update/destroy are ``{where, limit, skip, order}``.
``where`` is a criteria mapping (see ``parse_criteria``); ``order`` is
applied first, then ``skip``, then ``limit``.

Errors are raised rather than passed to callbacks:
    - StoreReadError / StoreWriteError from the key/value store, unmodified
    - CollectionNotFound from alter on an undefined collection
    - CollectionDropError when the row set cannot be removed
    - MissingCollectionState from create on a collection never defined
    - InvalidCriteriaError / InvalidQueryOptionsError for malformed options
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Mapping, Protocol

from kv_adapter.domain.errors import (
    AdapterError,
    CollectionDropError,
    CollectionNotFound,
    InvalidCriteriaError,
    InvalidQueryOptionsError,
    MissingCollectionState,
)
from kv_adapter.domain.value_objects import QueryOptions, Record, Schema

Options = Mapping[str, Any] | QueryOptions | None


class CollectionAdapter(Protocol):
    """Protocol for collection storage operations.

    Consistency:
        Every row operation reads the whole row set, changes it in memory
        and writes it back as one value. A failed write leaves the stored
        row set as it was.

    Example:
        adapter.initialize()
        adapter.define("Users", {"id": {"autoIncrement": True}, "name": "string"})
        ann = adapter.create("Users", {"name": "Ann"})
        adapter.update("Users", {"where": {"id": ann["id"]}}, {"age": 30})
        rows = adapter.find("Users", {"where": {"age": 30}})
        adapter.teardown()
    """

    identity: str

    @abstractmethod
    def initialize(self) -> None:
        """Open the underlying store and wait until it has loaded."""
        ...

    @abstractmethod
    def teardown(self) -> None:
        """Release the underlying store."""
        ...

    @abstractmethod
    def describe(self, collection: str) -> Schema | None:
        """Return the collection's schema, or None if undefined."""
        ...

    @abstractmethod
    def define(self, collection: str, schema: Mapping[str, Any]) -> None:
        """Store a schema and start the collection's auto-increment at 1."""
        ...

    @abstractmethod
    def drop(self, collection: str) -> None:
        """Remove the collection's rows and schema."""
        ...

    @abstractmethod
    def alter(self, collection: str, new_attributes: Mapping[str, Any]) -> Schema:
        """Merge new attributes into an existing schema."""
        ...

    @abstractmethod
    def create(self, collection: str, values: Mapping[str, Any] | None) -> Record:
        """Append a record and return it with generated fields filled in."""
        ...

    @abstractmethod
    def find(self, collection: str, options: Options = None) -> list[Record]:
        """Return the rows selected by the options, in stored (or requested) order."""
        ...

    @abstractmethod
    def update(
        self, collection: str, options: Options, values: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Merge values into every selected row. Returns the patch, not the rows."""
        ...

    @abstractmethod
    def destroy(self, collection: str, options: Options = None) -> None:
        """Remove every selected row."""
        ...

    @abstractmethod
    def count(self, collection: str, options: Options = None) -> int:
        """Return how many rows the options select."""
        ...


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
