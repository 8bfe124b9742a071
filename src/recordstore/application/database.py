"""Database - unified entry point for the record store.

The Database owns the table registry, the transaction buffer and the
transaction log, and drives snapshot persistence after every durable
mutation.

Usage:
    from recordstore import Database
    from recordstore.adapters import FileSnapshotStore

    db = Database("inventory", store=FileSnapshotStore("/var/lib/inventory"))
    db.create_table("items", {"sku": {"type": "string", "required": True}})
    db.create_index("items", "sku")

    result = db.insert("items", {"sku": "A-1", "qty": 3})
    db.find("items", {"qty": {"$gt": 0}}, sort={"sku": 1}, limit=10)

    with db.transaction():
        db.update("items", result.id, {"qty": 2})
        db.insert("items", {"sku": "B-7", "qty": 1})

Every mutating call flows through: schema validation -> direct apply (or
staging in the open transaction) -> snapshot save. Expected failures never
raise; they come back as OperationResult with an ErrorKind.

Thread Safety:
    One re-entrant lock is held for the duration of every public
    operation. Transactions are not an isolation mechanism: they group one
    caller's changes, and staged changes are invisible until commit.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, Mapping

from recordstore.adapters.outbound import FileSnapshotStore, InMemorySnapshotStore
from recordstore.adapters.snapshot_codec import decode_snapshot, encode_snapshot
from recordstore.application.results import OperationResult
from recordstore.domain.entities import Table, TransactionBuffer, TransactionLogEntry
from recordstore.domain.exceptions import (
    InvalidQueryError,
    RecordStoreError,
    SchemaDefinitionError,
    SnapshotFormatError,
    TableNotFoundError,
    TransactionStateError,
)
from recordstore.domain.services import (
    Selection,
    order_and_page,
    parse_filter,
    parse_find_options,
)
from recordstore.domain.value_objects import (
    ID_FIELD,
    Filter,
    Schema,
    copy_json_value,
    format_timestamp,
    utc_now,
)
from recordstore.infrastructure.config import Config, StorageConfig, get_config
from recordstore.infrastructure.logging import get_logger, setup_logging_from_config
from recordstore.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from recordstore.infrastructure.tracing import setup_tracing, trace_span
from recordstore.ports.outbound import SnapshotStore

DEFAULT_DATABASE_NAME = "tinyDB"


def create_snapshot_store(storage: StorageConfig) -> SnapshotStore:
    """Build the snapshot store selected by configuration."""
    if storage.backend == "file":
        return FileSnapshotStore(storage.data_dir, fsync=storage.fsync)
    return InMemorySnapshotStore()


class Database:
    """Embeddable single-process record store.

    Attributes:
        name: Database name, also the key snapshots are stored under.
    """

    def __init__(
        self,
        name: str = DEFAULT_DATABASE_NAME,
        store: SnapshotStore | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the database and load its stored snapshot, if any.

        Args:
            name: Database name.
            store: Snapshot store; None keeps the database memory-only.
            clock: Source of record timestamps (defaults to UTC now).
            metrics: Metrics registry (defaults to the process-wide one).
        """
        self._name = name or DEFAULT_DATABASE_NAME
        self._store = store
        self._clock = clock or utc_now
        self._metrics = metrics or get_metrics()
        self._logger = get_logger(__name__, database=self._name)

        self._lock = threading.RLock()
        self._tables: dict[str, Table] = {}
        self._transaction_log: list[TransactionLogEntry] = []
        self._buffer = TransactionBuffer()

        self._load()

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        *,
        setup_observability: bool = False,
        **kwargs: Any,
    ) -> Database:
        """Create a database with the name and snapshot store from Config.

        Args:
            config: Configuration (defaults to the environment-derived one).
            setup_observability: Also configure logging, and start the
                metrics endpoint and tracing export when configured.
            **kwargs: Passed to the constructor (clock, metrics).
        """
        config = config or get_config()
        config.ensure_directories()

        if setup_observability:
            observability = config.observability
            setup_logging_from_config(observability)
            if observability.metrics_port is not None and "metrics" not in kwargs:
                kwargs["metrics"] = setup_metrics(observability.metrics_port)
            if observability.otel_endpoint:
                setup_tracing(observability.otel_service_name, observability.otel_endpoint)

        return cls(
            config.storage.database_name,
            create_snapshot_store(config.storage),
            **kwargs,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def store(self) -> SnapshotStore | None:
        return self._store

    @property
    def in_transaction(self) -> bool:
        return self._buffer.is_open

    @property
    def transaction_log(self) -> list[dict[str, Any]]:
        """Copies of the committed transaction log entries, oldest first."""
        with self._lock:
            return [entry.to_dict() for entry in self._transaction_log]

    # -- tables ------------------------------------------------------------

    def create_table(
        self, name: str, schema: Mapping[str, Any] | Schema | None = None
    ) -> bool:
        """Create a table, optionally with a schema.

        Returns:
            True if created; False if the name is taken, empty, or the
            schema is malformed.
        """
        with self._lock:
            if not isinstance(name, str) or not name or name in self._tables:
                return False

            if schema is None or isinstance(schema, Schema):
                parsed = schema
            else:
                try:
                    parsed = Schema.from_dict(schema)
                except SchemaDefinitionError as e:
                    self._logger.warning("table_schema_rejected", table=name, error=str(e))
                    return False

            self._tables[name] = Table(name, parsed)
            self._logger.info("table_created", table=name, schema_fields=len(parsed or ()))
            self._persist()
            return True

    def drop_table(self, name: str) -> bool:
        """Drop a table with its records, schema and indexes.

        Changes staged for the table in an open transaction are discarded.
        """
        with self._lock:
            if not isinstance(name, str) or name not in self._tables:
                return False
            del self._tables[name]
            self._buffer.discard_table(name)
            self._logger.info("table_dropped", table=name)
            self._persist()
            return True

    def list_tables(self) -> list[str]:
        with self._lock:
            return list(self._tables)

    def get_table(self, name: str) -> Table | None:
        """The live Table object, for inspection. Mutate through Database only."""
        with self._lock:
            return self._tables.get(name) if isinstance(name, str) else None

    # -- records -----------------------------------------------------------

    def insert(self, table_name: str, record: Mapping[str, Any]) -> OperationResult:
        """Insert a record; the result carries its new id."""

        def action() -> OperationResult:
            table = self._require_table(table_name)
            timestamp = self._timestamp()
            if self._buffer.is_open:
                prepared = table.prepare_insert(record, timestamp)
                self._buffer.stage_insert(table_name, prepared)
                return OperationResult.ok(id=prepared[ID_FIELD])

            record_id = table.insert(record, timestamp)
            self._persist()
            return OperationResult.ok(id=record_id)

        return self._run("insert", action)

    def update(
        self, table_name: str, record_id: str, changes: Mapping[str, Any]
    ) -> OperationResult:
        """Merge partial fields into a record. `_id` and `_createdAt` are kept."""

        def action() -> OperationResult:
            table = self._require_table(table_name)
            timestamp = self._timestamp()
            if self._buffer.is_open:
                position = table.position_of(record_id)
                base = self._buffer.pending_update(table_name, position)
                position, merged = table.prepare_update(record_id, changes, timestamp, base=base)
                self._buffer.stage_update(table_name, position, merged)
                return OperationResult.ok()

            table.update(record_id, changes, timestamp)
            self._persist()
            return OperationResult.ok()

        return self._run("update", action)

    def delete(self, table_name: str, record_id: str) -> OperationResult:
        """Delete a record by id."""

        def action() -> OperationResult:
            table = self._require_table(table_name)
            if self._buffer.is_open:
                self._buffer.stage_delete(table_name, table.position_of(record_id))
                return OperationResult.ok()

            table.delete(record_id)
            self._persist()
            return OperationResult.ok()

        return self._run("delete", action)

    # -- queries -----------------------------------------------------------

    def find(
        self,
        table_name: str,
        query: Mapping[str, Any] | None = None,
        *,
        sort: Mapping[str, Any] | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> OperationResult:
        """Find records matching a filter.

        Args:
            table_name: Table to query.
            query: Filter mapping; None or {} matches every record.
            sort: Ordered mapping of field -> 1 (ascending) or -1 (descending).
            skip: Records to skip after sorting.
            limit: Maximum records to return; None or 0 for no limit.

        Returns:
            OperationResult with `records` (copies) in insertion order unless
            sorted.
        """

        def action() -> OperationResult:
            with trace_span("recordstore.find", {"table": str(table_name)}) as span:
                table = self._require_table(table_name)
                flt = parse_filter(query)
                options = parse_find_options(sort, skip, limit)

                selection = self._select(table, flt)
                page = order_and_page(selection.records, options)
                span.set_attribute("matched", len(selection.records))
                span.set_attribute("returned", len(page))
                return OperationResult.ok(records=[copy_json_value(r) for r in page])

        return self._run("find", action)

    def find_by_id(self, table_name: str, record_id: str) -> OperationResult:
        """Fetch one record by id."""

        def action() -> OperationResult:
            table = self._require_table(table_name)
            return OperationResult.ok(record=copy_json_value(table.find_by_id(record_id)))

        return self._run("find_by_id", action)

    def count(self, table_name: str, query: Mapping[str, Any] | None = None) -> OperationResult:
        """Count records matching a filter."""

        def action() -> OperationResult:
            table = self._require_table(table_name)
            selection = self._select(table, parse_filter(query))
            return OperationResult.ok(count=len(selection.records))

        return self._run("count", action)

    def create_index(self, table_name: str, field_name: str) -> OperationResult:
        """Create an equality index; fails if the field is already indexed."""

        def action() -> OperationResult:
            table = self._require_table(table_name)
            if not isinstance(field_name, str) or not field_name:
                raise InvalidQueryError("Index field name must be a non-empty string")
            table.create_index(field_name)
            self._logger.info("index_created", table=table_name, field=field_name)
            self._persist()
            return OperationResult.ok()

        return self._run("create_index", action)

    # -- transactions ------------------------------------------------------

    def begin_transaction(self) -> OperationResult:
        def action() -> OperationResult:
            self._buffer.begin()
            self._metrics.transactions_active.inc()
            self._logger.debug("transaction_begun")
            return OperationResult.ok()

        return self._run("begin_transaction", action)

    def commit_transaction(self) -> OperationResult:
        """Apply every staged change, log the changeset, persist once."""

        def action() -> OperationResult:
            with trace_span("recordstore.commit") as span:
                changes = self._buffer.close()
                self._metrics.transactions_active.dec()

                changeset: dict[str, Any] = {}
                for table_name, table_changes in changes.items():
                    table = self._tables.get(table_name)
                    if table is None:
                        self._logger.warning("commit_table_missing", table=table_name)
                        continue
                    changeset[table_name] = table_changes.to_dict()
                    table_changes.apply(table)

                self._transaction_log.append(
                    TransactionLogEntry(timestamp=self._timestamp(), changes=changeset)
                )
                span.set_attribute("tables", len(changeset))
                self._metrics.transactions_total.labels(status="commit").inc()
                self._logger.info("transaction_committed", tables=list(changeset))
                self._persist()
                return OperationResult.ok()

        return self._run("commit_transaction", action)

    def rollback_transaction(self) -> OperationResult:
        """Discard every staged change. Tables and indexes are untouched."""

        def action() -> OperationResult:
            self._buffer.close()
            self._metrics.transactions_active.dec()
            self._metrics.transactions_total.labels(status="rollback").inc()
            self._logger.info("transaction_rolled_back")
            return OperationResult.ok()

        return self._run("rollback_transaction", action)

    @contextmanager
    def transaction(self) -> Iterator[Database]:
        """Group changes: commit on normal exit, roll back on an exception.

        Raises:
            TransactionStateError: If a transaction is already open.
        """
        begun = self.begin_transaction()
        if not begun:
            raise TransactionStateError(begun.error or "Transaction already in progress")
        try:
            yield self
        except BaseException:
            if self._buffer.is_open:
                self.rollback_transaction()
            raise
        else:
            if self._buffer.is_open:
                self.commit_transaction()

    # -- snapshots ---------------------------------------------------------

    def export_snapshot(self) -> str:
        """Serialize all tables and the transaction log to snapshot JSON."""
        with self._lock:
            return encode_snapshot(self._name, self._tables, self._transaction_log)

    def import_snapshot(self, snapshot: str | bytes) -> OperationResult:
        """Replace the entire state with a snapshot.

        The snapshot is fully parsed before anything is replaced; on failure
        the current state is untouched and the result is INVALID. An open
        transaction is discarded on success.
        """

        def action() -> OperationResult:
            if not isinstance(snapshot, (str, bytes)):
                raise SnapshotFormatError("Invalid JSON data: snapshot must be a string")
            decoded = decode_snapshot(snapshot)

            self._discard_open_transaction("import")
            self._tables = decoded.tables
            self._transaction_log = decoded.transaction_log
            if decoded.name:
                self._name = decoded.name
                self._logger = get_logger(__name__, database=self._name)
            self._logger.info("snapshot_imported", tables=list(self._tables))
            self._persist()
            return OperationResult.ok()

        return self._run("import_snapshot", action)

    def clear(self) -> OperationResult:
        """Drop every table and the transaction log."""

        def action() -> OperationResult:
            self._discard_open_transaction("clear")
            self._tables = {}
            self._transaction_log = []
            self._logger.info("database_cleared")
            self._persist()
            return OperationResult.ok()

        return self._run("clear", action)

    # -- internals ---------------------------------------------------------

    def _run(self, operation: str, action: Callable[[], OperationResult]) -> OperationResult:
        """Run an operation under the lock, converting domain errors to results."""
        start = time.perf_counter()
        with self._lock:
            try:
                result = action()
            except RecordStoreError as e:
                result = OperationResult.from_error(e)
                self._logger.debug(
                    "operation_failed", operation=operation, kind=e.kind.value, error=str(e)
                )

        status = "success" if result.success else result.error_kind.value
        self._metrics.operations_total.labels(operation=operation, status=status).inc()
        self._metrics.operation_latency_seconds.labels(operation=operation).observe(
            time.perf_counter() - start
        )
        return result

    def _require_table(self, table_name: str) -> Table:
        table = self._tables.get(table_name) if isinstance(table_name, str) else None
        if table is None:
            raise TableNotFoundError(table_name)
        return table

    def _select(self, table: Table, flt: Filter) -> Selection:
        selection = table.select(flt)
        if selection.used_index:
            for field_name in selection.index_fields:
                self._metrics.index_lookups_total.labels(table=table.name, field=field_name).inc()
        else:
            self._metrics.full_scans_total.labels(table=table.name).inc()
        return selection

    def _timestamp(self) -> str:
        return format_timestamp(self._clock())

    def _discard_open_transaction(self, reason: str) -> None:
        if not self._buffer.is_open:
            return
        self._buffer.close()
        self._metrics.transactions_active.dec()
        self._metrics.transactions_total.labels(status="rollback").inc()
        self._logger.warning("transaction_discarded", reason=reason)

    def _persist(self) -> None:
        """Hand a full snapshot to the store. Failures are logged, never raised."""
        if self._store is None:
            return

        blob = encode_snapshot(self._name, self._tables, self._transaction_log)
        try:
            self._store.save(self._name, blob)
        except Exception as e:
            self._metrics.persistence_failures_total.inc()
            self._logger.warning("snapshot_save_failed", error=str(e), error_type=type(e).__name__)
            return

        self._metrics.snapshots_saved_total.inc()
        self._metrics.snapshot_size_bytes.set(len(blob))

    def _load(self) -> None:
        """Restore state from the store. A bad snapshot leaves the database empty."""
        if self._store is None:
            return

        try:
            blob = self._store.load(self._name)
        except Exception as e:
            self._logger.error("snapshot_load_failed", error=str(e), error_type=type(e).__name__)
            return
        if blob is None:
            return

        try:
            decoded = decode_snapshot(blob)
        except SnapshotFormatError as e:
            self._logger.error("snapshot_load_failed", error=str(e))
            return

        self._tables = decoded.tables
        self._transaction_log = decoded.transaction_log
        self._logger.info("snapshot_loaded", tables=list(self._tables))
