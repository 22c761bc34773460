"""Schema registry backed by the key/value store."""

from __future__ import annotations

from typing import Any, Mapping

from kv_adapter.domain.errors import CollectionNotFound
from kv_adapter.domain.value_objects.record import TIMESTAMP_ATTRIBUTES, Schema
from kv_adapter.ports.outbound.key_value_store import KeyValueStore


class SchemaRegistry:
    """Get/set named schema definitions under ``<prefix><collection>`` keys."""

    def __init__(self, store: KeyValueStore, prefix: str = "schema:") -> None:
        self._store = store
        self._prefix = prefix

    def key_for(self, collection: str) -> str:
        return f"{self._prefix}{collection}"

    def get(self, collection: str) -> Schema | None:
        """Return the stored schema, or None if the collection is undefined."""
        return self._store.get(self.key_for(collection))

    def set(self, collection: str, schema: Mapping[str, Any]) -> None:
        """Store (replace) a collection's schema."""
        self._store.set(self.key_for(collection), dict(schema))

    def alter(self, collection: str, new_attributes: Mapping[str, Any]) -> Schema:
        """Shallow-merge new attributes over the stored schema.

        Raises:
            CollectionNotFound: If no schema is stored for the collection.
        """
        existing = self.get(collection)
        if existing is None:
            raise CollectionNotFound(collection)
        merged = {**existing, **new_attributes}
        self.set(collection, merged)
        return merged

    def remove(self, collection: str) -> None:
        self._store.remove(self.key_for(collection))

    def collections(self) -> list[str]:
        """Names of every collection with a stored schema."""
        return [
            key[len(self._prefix):]
            for key in self._store.keys()
            if key.startswith(self._prefix)
        ]


def timestamp_attributes(schema: Mapping[str, Any] | None) -> list[str]:
    """Timestamp attributes (createdAt/updatedAt) the schema turns on."""
    if not schema:
        return []
    return [name for name in TIMESTAMP_ATTRIBUTES if schema.get(name)]
