"""Per-collection auto-increment counters.

Counters live in memory for as long as their owner (normally one
``CollectionStore``) does. They start at 1 when a collection is defined,
advance by exactly one per assigned field, and are discarded on drop.

Limitations:
    Nothing is persisted. A restarted process starts every counter at 1
    again, and two processes sharing one data file will hand out the same
    values. Use ``seed`` to continue from a known maximum after a restart.
"""

from __future__ import annotations

import threading
from typing import Any, Mapping

from kv_adapter.domain.errors import MissingCollectionState
from kv_adapter.domain.value_objects.record import Record, is_auto_increment

INITIAL_VALUE = 1


class AutoIncrementCounters:
    """Owned table of collection name -> next auto-increment value."""

    def __init__(self) -> None:
        self._next: dict[str, int] = {}
        self._lock = threading.Lock()

    def __contains__(self, collection: object) -> bool:
        return collection in self._next

    def __len__(self) -> int:
        return len(self._next)

    def collections(self) -> list[str]:
        """Names of every collection with a live counter."""
        with self._lock:
            return list(self._next)

    def initialize(self, collection: str) -> None:
        """Start (or restart) the counter for a collection at 1."""
        with self._lock:
            self._next[collection] = INITIAL_VALUE

    def seed(self, collection: str, next_value: int) -> None:
        """Set the next value handed out. Counters never move backwards."""
        with self._lock:
            current = self._next.get(collection, INITIAL_VALUE)
            self._next[collection] = max(current, next_value)

    def reset(self, collection: str) -> None:
        """Forget a collection's counter (drop)."""
        with self._lock:
            self._next.pop(collection, None)

    def peek(self, collection: str) -> int:
        """Return the next value without consuming it.

        Raises:
            MissingCollectionState: If the collection has no counter.
        """
        try:
            return self._next[collection]
        except KeyError:
            raise MissingCollectionState(collection) from None

    def take(self, collection: str) -> int:
        """Consume and return the next value.

        Raises:
            MissingCollectionState: If the collection has no counter.
        """
        with self._lock:
            if collection not in self._next:
                raise MissingCollectionState(collection)
            value = self._next[collection]
            self._next[collection] = value + 1
            return value


def apply_auto_increment(
    counters: AutoIncrementCounters,
    collection: str,
    schema: Mapping[str, Any] | None,
    values: Record,
) -> Record:
    """Overwrite auto-increment attributes in ``values`` with counter values.

    The attribute set considered is the union of schema and ``values`` keys;
    only attributes whose schema descriptor carries ``autoIncrement`` are
    assigned. Caller-supplied values for those attributes are replaced.

    Args:
        counters: Counter table owning the collection's state.
        collection: Collection name.
        schema: Collection schema (None is treated as empty).
        values: Record being created; mutated in place.

    Returns:
        ``values``.

    Raises:
        MissingCollectionState: If the collection was never defined.
    """
    if collection not in counters:
        raise MissingCollectionState(collection)
    schema = schema or {}
    for attribute in {**schema, **values}:
        if is_auto_increment(schema.get(attribute)):
            values[attribute] = counters.take(collection)
    return values
