"""Key/value store port.

This outbound port is the only contract the adapter needs from the
embedded store underneath it. Values are whole JSON-compatible documents
(schemas and row lists); the store never sees partial updates.

The store is responsible for:
- Returning the last value set for a key, or None
- Replacing a key's value in one step
- Signalling once that its initial load has completed
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Callable, Protocol

from kv_adapter.domain.errors import StoreReadError, StoreWriteError

LoadListener = Callable[[], None]


class KeyValueStore(Protocol):
    """Protocol for the embedded key/value store.

    Atomicity:
        ``set`` replaces the whole value or fails without changing it. The
        adapter relies on this to keep row sets all-or-nothing.

    Thread Safety:
        Implementations must tolerate calls from multiple threads; the
        adapter serialises read-modify-write cycles per collection itself.
    """

    @property
    @abstractmethod
    def is_loaded(self) -> bool:
        """Return True once the initial load has completed."""
        ...

    @abstractmethod
    def on_load(self, listener: LoadListener) -> None:
        """Register a listener fired once when loading completes.

        Listeners registered after the load has completed are not called.
        """
        ...

    @abstractmethod
    def load(self) -> None:
        """Load existing content and fire the load listeners.

        Raises:
            StoreReadError: If existing content cannot be read.
        """
        ...

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the value stored under key, or None.

        The returned value is a copy; mutating it does not change the store.

        Raises:
            StoreReadError: If the store is closed or the value unreadable.
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Replace the value stored under key.

        Raises:
            StoreWriteError: If the write fails. The previous value is kept.
        """
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key. Removing a missing key is not an error.

        Raises:
            StoreWriteError: If the removal fails.
        """
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Return all live keys in insertion order."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release resources. The store must not be used afterwards."""
        ...


__all__ = ["KeyValueStore", "LoadListener", "StoreReadError", "StoreWriteError"]
