"""Append-only file-backed key/value store.

All values are held in memory. Every ``set`` and ``remove`` appends one
JSON line to the data file, and ``load`` replays the file to rebuild the
in-memory map. The last line for a key wins.

File Format (one JSON document per line):
    {"key": "data:Users", "val": [{"id": 1, "name": "Ann"}]}
    {"key": "data:Users"}                                    # removal

Datetimes are written as ISO-8601 strings and come back as strings after
a reload. A truncated final line (crash mid-append) is skipped on load;
damage anywhere else fails the load.

Thread Safety:
    Single process. Appends are serialised internally.
"""

from __future__ import annotations

import copy
import json
import os
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, TextIO

from kv_adapter.domain.errors import StoreReadError, StoreWriteError
from kv_adapter.infrastructure.logging import get_logger
from kv_adapter.ports.outbound.key_value_store import LoadListener


def _encode(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class FileKeyValueStore:
    """File-backed implementation of the KeyValueStore protocol.

    Attributes:
        file_path: Path to the append-only data file.
        fsync: Whether every append is fsync'ed before returning.
    """

    def __init__(self, file_path: str | Path, fsync: bool = False) -> None:
        """Initialize the store. Nothing is read until ``load``.

        Args:
            file_path: Path to the data file (created on load if missing).
            fsync: Force each append to stable storage.
        """
        self._file_path = Path(file_path)
        self._fsync = fsync
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._listeners: list[LoadListener] = []
        self._file: TextIO | None = None
        self._loaded = False
        self._closed = False
        self._lines_written = 0
        self._log = get_logger(__name__, component="file_store")

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def on_load(self, listener: LoadListener) -> None:
        if not self._loaded:
            self._listeners.append(listener)

    def load(self) -> None:
        """Replay the data file, open it for appending, fire listeners.

        Raises:
            StoreReadError: If the file cannot be read or is corrupt.
        """
        if self._closed:
            raise StoreReadError("Store is closed")
        if self._loaded:
            return

        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.touch(exist_ok=True)
            self._replay()
            needs_newline = not self._ends_with_newline()
            self._file = open(self._file_path, "a", encoding="utf-8")
            if needs_newline:
                self._file.write("\n")
                self._file.flush()
        except OSError as e:
            raise StoreReadError(f"Cannot load {self._file_path}: {e}") from e

        self._loaded = True
        self._log.info("store_loaded", path=str(self._file_path), keys=len(self._data))

        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener()

    def _replay(self) -> None:
        with open(self._file_path, "r", encoding="utf-8") as f:
            content = f.read()
        lines = content.split("\n")

        # A complete file ends with a newline, leaving an empty last element
        last = len(lines) - 1
        for number, line in enumerate(lines):
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
                key = entry["key"]
            except (ValueError, KeyError, TypeError) as e:
                if number == last:
                    self._log.warning(
                        "truncated_line_skipped", path=str(self._file_path), line=number + 1
                    )
                    # Cut the partial line so later appends start on a fresh line
                    with open(self._file_path, "w", encoding="utf-8") as f:
                        f.write(content[: content.rfind("\n") + 1])
                    continue
                raise StoreReadError(
                    f"Corrupt entry at {self._file_path}:{number + 1}"
                ) from e
            if "val" in entry:
                self._data[key] = entry["val"]
            else:
                self._data.pop(key, None)
            self._lines_written += 1

    def _ends_with_newline(self) -> bool:
        """True for an empty file or one whose last byte is a newline."""
        with open(self._file_path, "rb") as f:
            f.seek(0, os.SEEK_END)
            if f.tell() == 0:
                return True
            f.seek(-1, os.SEEK_END)
            return f.read(1) == b"\n"

    def get(self, key: str) -> Any | None:
        if self._closed:
            raise StoreReadError("Store is closed")
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        """Append the new value, then make it visible.

        Raises:
            StoreWriteError: If the value is not serialisable or the append fails.
        """
        try:
            line = json.dumps({"key": key, "val": value}, default=_encode)
        except (TypeError, ValueError) as e:
            raise StoreWriteError(f"Cannot serialise value for {key}: {e}") from e
        snapshot = copy.deepcopy(value)
        with self._lock:
            self._append(line)
            self._data[key] = snapshot

    def remove(self, key: str) -> None:
        with self._lock:
            self._append(json.dumps({"key": key}))
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def compact(self) -> None:
        """Rewrite the data file with one line per live key.

        Raises:
            StoreWriteError: If the rewrite fails. The old file is kept.
        """
        with self._lock:
            if self._file is None:
                raise StoreWriteError("Store is not loaded")
            tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".compact")
            try:
                with open(tmp_path, "w", encoding="utf-8") as tmp:
                    for key, value in self._data.items():
                        tmp.write(json.dumps({"key": key, "val": value}, default=_encode) + "\n")
                    tmp.flush()
                    os.fsync(tmp.fileno())
                self._file.close()
                os.replace(tmp_path, self._file_path)
                self._file = open(self._file_path, "a", encoding="utf-8")
            except OSError as e:
                raise StoreWriteError(f"Compaction of {self._file_path} failed: {e}") from e
            before, self._lines_written = self._lines_written, len(self._data)
        self._log.info("store_compacted", path=str(self._file_path), lines_before=before,
                    lines_after=len(self._data))

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None
            self._closed = True

    def _append(self, line: str) -> None:
        if self._closed or self._file is None:
            raise StoreWriteError("Store is not open for writing")
        try:
            self._file.write(line + "\n")
            self._file.flush()
            if self._fsync:
                os.fsync(self._file.fileno())
        except OSError as e:
            raise StoreWriteError(f"Append to {self._file_path} failed: {e}") from e
        self._lines_written += 1
