"""Collection Store - unified entry point for the adapter.

This module provides the CollectionStore class that implements the
collection operations on top of a key/value store. Each collection owns
two keys: ``<schema_prefix><name>`` for its schema and
``<data_prefix><name>`` for its row set.

Usage:
    from kv_adapter.application import CollectionStore
    from kv_adapter.infrastructure.config import AdapterConfig

    store = CollectionStore(AdapterConfig(persistent=True, db_file_path="./dev.db"))
    store.initialize()

    store.define("Users", {"id": {"autoIncrement": True}, "createdAt": True})
    store.create("Users", {"name": "Ann"})
    store.find("Users", {"where": {"name": "Ann"}})

    store.teardown()

Every row operation follows the same cycle: read the whole row set, work on
it in memory, write the whole row set back. A per-collection lock keeps two
threads sharing one CollectionStore from interleaving that cycle on the
same collection. Separate processes sharing a data file are not
coordinated.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Generator, Mapping

from kv_adapter.adapters.outbound import FileKeyValueStore, InMemoryKeyValueStore
from kv_adapter.domain.errors import (
    CollectionDropError,
    InvalidQueryOptionsError,
    MissingCollectionState,
    StoreReadError,
    StoreWriteError,
)
from kv_adapter.domain.services import (
    AutoIncrementCounters,
    CriteriaEvaluator,
    SchemaRegistry,
    apply_auto_increment,
    timestamp_attributes,
)
from kv_adapter.domain.value_objects import QueryOptions, Record, Schema, SortKey
from kv_adapter.infrastructure.config import AdapterConfig
from kv_adapter.infrastructure.logging import collection_context, get_logger
from kv_adapter.infrastructure.metrics import MetricsRegistry, get_metrics
from kv_adapter.infrastructure.tracing import trace_span
from kv_adapter.ports.inbound.collection_adapter import Options
from kv_adapter.ports.outbound.key_value_store import KeyValueStore


class CollectionStore:
    """Collection operations over a key/value store.

    Implements the CollectionAdapter port. The auto-increment counters are
    owned by the instance: two CollectionStore objects over the same data
    hand out independent (and possibly clashing) values.

    Attributes:
        identity: Adapter name reported to the data-access layer.
    """

    identity = "kv"

    def __init__(
        self,
        config: AdapterConfig | None = None,
        store: KeyValueStore | None = None,
        metrics: MetricsRegistry | None = None,
        counters: AutoIncrementCounters | None = None,
    ) -> None:
        """Initialize the collection store.

        Args:
            config: Adapter settings. Defaults to an in-memory setup.
            store: Key/value store to use. Built from config on initialize if None.
            metrics: Metrics registry. Uses the global registry if None.
            counters: Auto-increment table. A fresh one is created if None.
        """
        self._config = config or AdapterConfig()
        self._store = store
        self._metrics = metrics or get_metrics()
        self._counters = counters if counters is not None else AutoIncrementCounters()
        self._evaluator = CriteriaEvaluator(
            case_sensitive=self._config.attributes_case_sensitive,
            match_falsy_values=self._config.match_falsy_values,
        )
        self._schemas: SchemaRegistry | None = None
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._log = get_logger(__name__, component="collection_store")

    @property
    def config(self) -> AdapterConfig:
        return self._config

    @property
    def counters(self) -> AutoIncrementCounters:
        return self._counters

    @property
    def evaluator(self) -> CriteriaEvaluator:
        return self._evaluator

    @property
    def is_initialized(self) -> bool:
        return self._schemas is not None

    # --- Lifecycle ------------------------------------------------------------------

    def initialize(self) -> None:
        """Open the key/value store and wait for its load signal.

        In persistent mode the data file's directory is created first and
        the file is touched by the store's load.

        Raises:
            RuntimeError: If already initialized.
            StoreReadError: If the store fails to load or never signals it.
        """
        if self._schemas is not None:
            raise RuntimeError("Collection store already initialized")

        if self._store is None:
            self._store = self._build_store()

        loaded = threading.Event()
        if self._store.is_loaded:
            loaded.set()
        else:
            self._store.on_load(loaded.set)
            self._store.load()
        if not loaded.is_set():
            raise StoreReadError("Key/value store did not signal load completion")

        self._schemas = SchemaRegistry(self._store, self._config.schema_prefix)
        self._discard_stale_counters()
        self._metrics.collections_defined.set(len(self._counters))
        self._log.info(
            "collection_store_initialized",
            persistent=self._config.persistent,
            collections=len(self._schemas.collections()),
        )

    def teardown(self) -> None:
        """Close the key/value store. Safe to call more than once."""
        if self._store is not None:
            self._store.close()
        self._store = None
        self._schemas = None
        self._log.info("collection_store_torn_down")

    def _build_store(self) -> KeyValueStore:
        if self._config.persistent:
            self._config.ensure_directories()
            return FileKeyValueStore(self._config.db_file_path)
        return InMemoryKeyValueStore()

    def __enter__(self) -> "CollectionStore":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()

    # --- Collection lifecycle -------------------------------------------------------

    def describe(self, collection: str) -> Schema | None:
        """Return the collection's schema, or None if undefined."""
        with self._operation("describe", collection):
            schema = self._registry().get(collection)
            self._log.debug("collection_described", found=schema is not None)
            return schema

    def define(self, collection: str, schema: Mapping[str, Any]) -> None:
        """Store the schema and start the auto-increment counter at 1.

        Raises:
            StoreWriteError: If the schema cannot be written.
        """
        with self._operation("define", collection), self._lock_for(collection):
            self._registry().set(collection, schema)
            self._metrics.store_writes_total.labels(kind="schema").inc()
            self._counters.initialize(collection)
            self._metrics.collections_defined.set(len(self._counters))
            self._log.info("collection_defined", attributes=list(schema))

    def drop(self, collection: str) -> None:
        """Remove the row set and the schema.

        The schema removal is attempted even when the row set removal fails;
        only the row set failure is raised.

        Raises:
            CollectionDropError: If the row set could not be removed.
        """
        with self._operation("drop", collection), self._lock_for(collection):
            store = self._require_store()
            data_error: StoreWriteError | None = None
            try:
                store.remove(self._data_key(collection))
            except StoreWriteError as e:
                data_error = e

            try:
                self._registry().remove(collection)
            except StoreWriteError as e:
                self._log.warning("schema_remove_failed", error=str(e))

            if data_error is not None:
                self._log.error("collection_drop_failed", error=str(data_error))
                raise CollectionDropError(collection) from data_error

            self._counters.reset(collection)
            self._metrics.collections_defined.set(len(self._counters))
            with self._locks_guard:
                self._locks.pop(collection, None)
            self._log.info("collection_dropped")

    def alter(self, collection: str, new_attributes: Mapping[str, Any]) -> Schema:
        """Shallow-merge new attributes into the stored schema.

        Raises:
            CollectionNotFound: If the collection has no schema.
        """
        with self._operation("alter", collection), self._lock_for(collection):
            schema = self._registry().alter(collection, new_attributes)
            self._metrics.store_writes_total.labels(kind="schema").inc()
            self._log.info("collection_altered", added=list(new_attributes))
            return schema

    # --- Row operations -------------------------------------------------------------

    def create(self, collection: str, values: Mapping[str, Any] | None) -> Record:
        """Append a record to the collection.

        Auto-increment attributes are assigned from the collection's counter,
        and ``createdAt``/``updatedAt`` are stamped (UTC) when the schema
        turns them on.

        Returns:
            The stored record, generated fields included.

        Raises:
            MissingCollectionState: If the collection has no schema or no counter.
            StoreReadError / StoreWriteError: From the key/value store.
        """
        record: Record = dict(values or {})
        with self._operation("create", collection), self._lock_for(collection):
            schema = self._registry().get(collection)
            if schema is None:
                raise MissingCollectionState(collection)
            apply_auto_increment(self._counters, collection, schema, record)

            now = datetime.now(timezone.utc)
            for attribute in timestamp_attributes(schema):
                record[attribute] = now

            rows = self._read_rows(collection)
            rows.append(record)
            self._write_rows(collection, rows)

            self._metrics.rows_affected_total.labels(operation="create").inc()
            self._log.debug("record_created", record=record)
            return record

    def find(self, collection: str, options: Options = None) -> list[Record]:
        """Return the rows selected by ``options``.

        Raises:
            InvalidCriteriaError / InvalidQueryOptionsError: For malformed options.
            StoreReadError: From the key/value store.
        """
        query = QueryOptions.from_mapping(options)
        with self._operation("find", collection):
            rows = self._read_rows(collection)
            selected = self._select(rows, query, "find")
            self._log.debug("rows_found", criteria=str(query.where), matched=len(selected))
            return [rows[index] for index in selected]

    def count(self, collection: str, options: Options = None) -> int:
        """Return how many rows ``options`` select."""
        query = QueryOptions.from_mapping(options)
        with self._operation("count", collection):
            rows = self._read_rows(collection)
            return len(self._select(rows, query, "count"))

    def update(
        self, collection: str, options: Options, values: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Shallow-merge ``values`` into every selected row.

        Rows keep their position. Nothing is written when no row matches.

        Returns:
            The merge patch (not the updated rows).

        Raises:
            InvalidCriteriaError / InvalidQueryOptionsError: For malformed options.
            StoreReadError / StoreWriteError: From the key/value store.
        """
        query = QueryOptions.from_mapping(options)
        patch = dict(values)
        with self._operation("update", collection), self._lock_for(collection):
            rows = self._read_rows(collection)
            selected = self._select(rows, query, "update")
            for index in selected:
                rows[index] = {**rows[index], **patch}
            if selected:
                self._write_rows(collection, rows)

            self._metrics.rows_affected_total.labels(operation="update").inc(len(selected))
            self._log.info("rows_updated", criteria=str(query.where), updated=len(selected))
            return patch

    def destroy(self, collection: str, options: Options = None) -> None:
        """Remove every selected row.

        Nothing is written when no row matches, so the stored row set stays
        exactly as it was.

        Raises:
            InvalidCriteriaError / InvalidQueryOptionsError: For malformed options.
            StoreReadError / StoreWriteError: From the key/value store.
        """
        query = QueryOptions.from_mapping(options)
        with self._operation("destroy", collection), self._lock_for(collection):
            rows = self._read_rows(collection)
            selected = set(self._select(rows, query, "destroy"))
            if selected:
                kept = [row for index, row in enumerate(rows) if index not in selected]
                self._write_rows(collection, kept)

            self._metrics.rows_affected_total.labels(operation="destroy").inc(len(selected))
            self._log.info("rows_destroyed", criteria=str(query.where), destroyed=len(selected))

    # --- Internal -------------------------------------------------------------------

    def _discard_stale_counters(self) -> None:
        # Counters outlive the store across teardown/initialize; keep only
        # those whose schema is still stored.
        defined = set(self._schemas.collections())
        for collection in self._counters.collections():
            if collection not in defined:
                self._counters.reset(collection)
                self._log.info("stale_counter_discarded", collection=collection)

    def _require_store(self) -> KeyValueStore:
        if self._store is None or self._schemas is None:
            raise RuntimeError("Collection store not initialized")
        return self._store

    def _registry(self) -> SchemaRegistry:
        self._require_store()
        return self._schemas

    def _data_key(self, collection: str) -> str:
        return f"{self._config.data_prefix}{collection}"

    def _read_rows(self, collection: str) -> list[Record]:
        rows = self._require_store().get(self._data_key(collection))
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise StoreReadError(f"Row set for {collection} is not a list")
        return rows

    def _write_rows(self, collection: str, rows: list[Record]) -> None:
        self._require_store().set(self._data_key(collection), rows)
        self._metrics.store_writes_total.labels(kind="data").inc()

    def _select(self, rows: list[Record], query: QueryOptions, operation: str) -> list[int]:
        """Matching row positions after order, skip and limit."""
        self._metrics.rows_scanned_total.labels(operation=operation).inc(len(rows))
        selected = self._evaluator.matching_indices(rows, query.where)
        if not query.is_windowed:
            return selected
        if query.order:
            selected = self._sort(rows, selected, query.order)
        if query.skip:
            selected = selected[query.skip:]
        if query.limit is not None:
            selected = selected[: query.limit]
        return selected

    def _sort(self, rows: list[Record], indices: list[int], order: tuple[SortKey, ...]) -> list[int]:
        # Stable sorts from the least to the most significant key; rows
        # without a value for a key always come after rows that have one.
        for key in reversed(order):
            values = {i: self._evaluator.resolve(rows[i], key.attribute) for i in indices}
            present = [i for i in indices if values[i] is not None]
            missing = [i for i in indices if values[i] is None]
            try:
                present.sort(key=values.__getitem__, reverse=key.descending)
            except TypeError as e:
                raise InvalidQueryOptionsError(
                    f"Cannot order by {key.attribute}: values are not comparable"
                ) from e
            indices = present + missing
        return indices

    def _lock_for(self, collection: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(collection)
            if lock is None:
                lock = self._locks[collection] = threading.RLock()
            return lock

    @contextmanager
    def _operation(self, operation: str, collection: str) -> Generator[None, None, None]:
        """Trace, time, count and log-bind one collection operation."""
        attributes = {"kv.collection": collection, "kv.operation": operation}
        start = time.perf_counter()
        status = "success"
        with trace_span(f"kv.{operation}", attributes), collection_context(collection, operation):
            try:
                yield
            except Exception:
                status = "error"
                raise
            finally:
                self._metrics.operations_total.labels(operation=operation, status=status).inc()
                self._metrics.operation_latency_seconds.labels(operation=operation).observe(
                    time.perf_counter() - start
                )
