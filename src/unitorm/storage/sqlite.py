"""
SQLite storage backend built on the stdlib sqlite3 module.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..core.schema import Schema
from ..core.values import ObjectId, Row, Value
from ..dialects.base import Dialect
from ..dialects.sqlite import SQLiteDialect
from ..errors import ConfigurationError, LockConflictError, NotFoundError, OrmError, StorageError
from ..schema.builder import SchemaBuilder
from ..security.redaction import redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .base import ConnectionConfig, decode_row, missing_column_error, row_params

_LOCKED_MESSAGES = ("database is locked", "database table is locked")
_MISSING_COLUMN_MESSAGES = ("no such column:", "has no column named")
_BEGIN_MODES = ("DEFERRED", "IMMEDIATE", "EXCLUSIVE")


def _translate_error(exc: sqlite3.Error, schema: Optional[Schema] = None) -> OrmError:
    message = str(exc)
    if any(token in message for token in _LOCKED_MESSAGES):
        return LockConflictError(message)
    if schema is not None and any(token in message for token in _MISSING_COLUMN_MESSAGES):
        error = missing_column_error(schema, message.split(" ")[-1])
        if error is not None:
            return error
    return StorageError(message)


class SQLiteStorageTransaction:
    """
    Storage transaction bound to one sqlite3 connection in manual transaction mode.
    """

    def __init__(
        self,
        connection: sqlite3.Connection,
        *,
        dialect: Dialect,
        logger: logging.Logger,
        slow_query_ms: int,
    ) -> None:
        self.connection = connection
        self.builder = SchemaBuilder(dialect)
        self.logger = logger
        self.slow_query_ms = slow_query_ms

    def _execute(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        schema: Optional[Schema] = None,
    ) -> sqlite3.Cursor:
        cursor = self.connection.cursor()
        try:
            with time_call(
                "sqlite.execute",
                self.logger,
                sql=sql,
                params=redact_params(params),
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(sql, params)
        except sqlite3.Error as exc:
            raise _translate_error(exc, schema) from exc
        return cursor

    # ------------------------------------------------------------------ #
    def table_exists(self, table_name: str) -> bool:
        cursor = self._execute(self.builder.table_exists_sql(), (table_name,))
        return cursor.fetchone() is not None

    def create_table(self, schema: Schema) -> None:
        self._execute(self.builder.create_table_sql(schema))
        self.logger.info("Created table %s for %s", schema.table_name, schema.type_name)

    def insert_row(self, schema: Schema, row: Sequence[Value]) -> ObjectId:
        cursor = self._execute(self.builder.insert_sql(schema), row_params(row), schema=schema)
        return ObjectId(cursor.lastrowid)

    def update_row(self, object_id: ObjectId, schema: Schema, row: Sequence[Value]) -> None:
        params = row_params(row)
        params.append(int(object_id))
        self._execute(self.builder.update_sql(schema), params)

    def select_row(self, object_id: ObjectId, schema: Schema) -> Row:
        cursor = self._execute(self.builder.select_sql(schema), (int(object_id),), schema=schema)
        raw_row = cursor.fetchone()
        if raw_row is None:
            raise NotFoundError(object_id, schema.type_name)
        if schema.column_count == 0:
            return []
        return decode_row(schema, raw_row)

    def delete_row(self, object_id: ObjectId, schema: Schema) -> None:
        self._execute(self.builder.delete_sql(schema), (int(object_id),))

    def commit(self) -> None:
        self._execute("COMMIT")

    def rollback(self) -> None:
        self._execute("ROLLBACK")


@dataclass
class SQLiteConnectionState:
    connection: sqlite3.Connection
    config: ConnectionConfig


class SQLiteBackend:
    """
    Backend wrapping the Python stdlib sqlite3 module.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect = SQLiteDialect()
        self._state: SQLiteConnectionState | None = None
        self.logger = get_logger("storage.sqlite")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        path = self._normalize_path(config.url)
        timeout = config.timeout if config.timeout is not None else 5.0
        if config.isolation_level and config.isolation_level.upper() not in _BEGIN_MODES:
            raise ConfigurationError(
                f"Unsupported SQLite isolation level {config.isolation_level!r}; "
                f"expected one of {', '.join(_BEGIN_MODES)}"
            )

        self.logger.info("Opening SQLite database %s", config.descriptive_label())
        try:
            # isolation_level=None leaves BEGIN/COMMIT/ROLLBACK to the storage transaction
            connection = sqlite3.connect(path, isolation_level=None, timeout=timeout)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to open SQLite database {path!r}") from exc

        self._state = SQLiteConnectionState(connection, config)
        return connection

    def close(self) -> None:
        if self._state:
            self._state.connection.close()
            self._state = None

    def _ensure_state(self) -> SQLiteConnectionState:
        if not self._state:
            raise StorageError("SQLiteBackend is not connected.")
        return self._state

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def begin(self) -> SQLiteStorageTransaction:
        state = self._ensure_state()
        mode = (state.config.isolation_level or "DEFERRED").upper()
        transaction = SQLiteStorageTransaction(
            state.connection,
            dialect=self.dialect,
            logger=self.logger,
            slow_query_ms=self.slow_query_ms,
        )
        transaction._execute(f"BEGIN {mode}")
        return transaction

    @staticmethod
    def _normalize_path(url: str) -> str:
        url = url.split("?", 1)[0]
        if url in ("sqlite:///:memory:", "sqlite://", ":memory:"):
            return ":memory:"
        prefix = "sqlite:///"
        if url.startswith(prefix):
            return url[len(prefix) :]
        return url
