"""In-memory key/value store.

Used when the adapter runs with ``persistent=False``: everything is lost
when the process exits. Values are deep-copied on the way in and out so a
caller mutating a snapshot it read never changes the stored one.
"""

from __future__ import annotations

import copy
import threading
from typing import Any

from kv_adapter.domain.errors import StoreReadError, StoreWriteError
from kv_adapter.ports.outbound.key_value_store import LoadListener


class InMemoryKeyValueStore:
    """Dict-backed implementation of the KeyValueStore protocol."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._listeners: list[LoadListener] = []
        self._loaded = False
        self._closed = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def on_load(self, listener: LoadListener) -> None:
        if not self._loaded:
            self._listeners.append(listener)

    def load(self) -> None:
        """Nothing to read; fire the load listeners."""
        if self._closed:
            raise StoreReadError("Store is closed")
        if self._loaded:
            return
        self._loaded = True
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener()

    def get(self, key: str) -> Any | None:
        if self._closed:
            raise StoreReadError("Store is closed")
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        if self._closed:
            raise StoreWriteError("Store is closed")
        snapshot = copy.deepcopy(value)
        with self._lock:
            self._data[key] = snapshot

    def remove(self, key: str) -> None:
        if self._closed:
            raise StoreWriteError("Store is closed")
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def close(self) -> None:
        with self._lock:
            self._data.clear()
        self._closed = True
