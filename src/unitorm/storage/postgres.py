"""
PostgreSQL storage backend built on the psycopg driver.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..core.schema import Schema
from ..core.values import ObjectId, Row, Value
from ..dialects.base import Dialect
from ..dialects.postgres import PostgresDialect
from ..errors import (
    ConfigurationError,
    LockConflictError,
    NotFoundError,
    OrmError,
    StorageError,
)
from ..schema.builder import SchemaBuilder
from ..security.redaction import redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .base import ConnectionConfig, decode_row, missing_column_error, row_params

# lock_not_available, deadlock_detected, serialization_failure
_LOCK_SQLSTATES = frozenset({"55P03", "40P01", "40001"})
_UNDEFINED_COLUMN = "42703"
_COLUMN_RE = re.compile(r'column "([^"]+)"')
_ISOLATION_LEVELS = ("READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE")


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


def _translate_error(exc: Exception, schema: Optional[Schema] = None) -> OrmError:
    message = str(exc).strip()
    sqlstate = getattr(exc, "sqlstate", None)
    if sqlstate in _LOCK_SQLSTATES:
        return LockConflictError(message)
    if schema is not None and sqlstate == _UNDEFINED_COLUMN:
        match = _COLUMN_RE.search(message)
        if match:
            error = missing_column_error(schema, match.group(1))
            if error is not None:
                return error
    return StorageError(message)


class PostgresStorageTransaction:
    """
    Storage transaction bound to one psycopg connection.

    PostgreSQL aborts the whole transaction after a failed statement, so any
    translated error other than ``NotFoundError`` leaves it usable only for
    ``rollback()``.
    """

    def __init__(
        self,
        connection: Any,
        driver: Any,
        *,
        dialect: Dialect,
        logger: logging.Logger,
        slow_query_ms: int,
    ) -> None:
        self.connection = connection
        self.driver = driver
        self.builder = SchemaBuilder(dialect)
        self.logger = logger
        self.slow_query_ms = slow_query_ms

    def _execute(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        schema: Optional[Schema] = None,
    ) -> Any:
        cursor = self.connection.cursor()
        try:
            with time_call(
                "postgres.execute",
                self.logger,
                sql=sql,
                params=redact_params(params),
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(sql, params)
        except self.driver.Error as exc:
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
        returned = cursor.fetchone()
        if not returned:
            raise StorageError(f"INSERT into {schema.table_name} returned no identity")
        return ObjectId(int(returned[0]))

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
        try:
            self.connection.commit()
        except self.driver.Error as exc:
            raise _translate_error(exc) from exc

    def rollback(self) -> None:
        try:
            self.connection.rollback()
        except self.driver.Error as exc:
            raise _translate_error(exc) from exc


@dataclass
class PostgresConnectionState:
    connection: Any
    config: ConnectionConfig
    driver: Any


class PostgresBackend:
    """
    Backend wrapping the psycopg PostgreSQL driver.
    """

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect = PostgresDialect()
        self._state: PostgresConnectionState | None = None
        self.logger = get_logger("storage.postgres")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def connect(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise ConfigurationError("psycopg is required to use PostgresBackend.")

        isolation_level = self._normalize_isolation_level(config.isolation_level)
        options = dict(config.options or {})
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        self.logger.info("Connecting to PostgreSQL %s", config.descriptive_label())

        # query-string options were already parsed into the config
        conninfo = config.url.split("?", 1)[0]
        try:
            connection = driver.connect(conninfo, **options)
        except Exception as exc:
            raise StorageError("Failed to connect to PostgreSQL.") from exc
        connection.autocommit = False

        config.isolation_level = isolation_level
        self._state = PostgresConnectionState(connection, config, driver)
        return connection

    def close(self) -> None:
        if self._state:
            try:
                self._state.connection.close()
            finally:
                self._state = None

    def _ensure_state(self) -> PostgresConnectionState:
        if not self._state:
            raise StorageError("PostgresBackend is not connected.")
        return self._state

    def begin(self) -> PostgresStorageTransaction:
        state = self._ensure_state()
        if getattr(state.connection, "closed", False):
            self.logger.warning("PostgreSQL connection closed; reconnecting.")
            self.connect(state.config)
            state = self._ensure_state()
        transaction = PostgresStorageTransaction(
            state.connection,
            state.driver,
            dialect=self.dialect,
            logger=self.logger,
            slow_query_ms=self.slow_query_ms,
        )
        # psycopg opens the transaction implicitly on the first statement
        if state.config.isolation_level:
            transaction._execute(f"SET TRANSACTION ISOLATION LEVEL {state.config.isolation_level}")
        return transaction

    @staticmethod
    def _normalize_isolation_level(level: str | None) -> str | None:
        if not level:
            return None
        normalized = " ".join(level.replace("_", " ").upper().split())
        if normalized not in _ISOLATION_LEVELS:
            raise ConfigurationError(f"Unsupported PostgreSQL isolation level {level!r}")
        return normalized
