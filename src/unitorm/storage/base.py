"""
Storage-transaction protocol and shared helpers for unitorm backends.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from ..core.schema import Schema
from ..core.values import DataType, ObjectId, Row, Value
from ..dialects.base import Dialect
from ..errors import ConfigurationError, MissingColumnError, UnexpectedTypeError
from ..security.dsns import DSNConfig, parse_dsn


class StorageTransaction(Protocol):
    """
    One open backend transaction, used by the transaction engine for
    single-row operations keyed by identity.
    """

    def table_exists(self, table_name: str) -> bool:
        """
        Report whether ``table_name`` exists in the backend.
        """

    def create_table(self, schema: Schema) -> None:
        """
        Create the table described by ``schema`` with an identity column.
        """

    def insert_row(self, schema: Schema, row: Sequence[Value]) -> ObjectId:
        """
        Insert ``row`` and return the identity assigned by the backend.
        """

    def update_row(self, object_id: ObjectId, schema: Schema, row: Sequence[Value]) -> None:
        """
        Overwrite every column of the row with identity ``object_id``.
        """

    def select_row(self, object_id: ObjectId, schema: Schema) -> Row:
        """
        Load the row with identity ``object_id``; raise ``NotFoundError`` if absent.
        """

    def delete_row(self, object_id: ObjectId, schema: Schema) -> None:
        """
        Delete the row with identity ``object_id``.
        """

    def commit(self) -> None:
        """
        Commit the backend transaction.
        """

    def rollback(self) -> None:
        """
        Roll back the backend transaction.
        """


class StorageBackend(Protocol):
    """
    Connection-level interface producing storage transactions.
    """

    dialect: Dialect

    def connect(self, config: "ConnectionConfig") -> Any:
        """
        Establish a connection handle using the supplied configuration.
        """

    def begin(self) -> StorageTransaction:
        """
        Start a backend transaction on the open connection.
        """

    def close(self) -> None:
        """
        Close underlying resources. Implementations should be idempotent.
        """


# ---------------------------------------------------------------------- #
# Configuration
# ---------------------------------------------------------------------- #


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


def _parse_int(value: str, *, key: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer value for '{key}': {value!r}") from exc


def _pop_float(query: dict[str, str], key: str) -> float | None:
    if key not in query:
        return None
    return _parse_float(query.pop(key), key=key)


def _parse_option_values(query: dict[str, str]) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for key, value in query.items():
        if key == "connect_timeout":
            options[key] = _parse_int(value, key=key)
        else:
            options[key] = value
    return options


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for storage backends.
    """

    url: str
    isolation_level: str | None = None
    timeout: float | None = None
    options: dict[str, Any] | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @property
    def scheme(self) -> str:
        if self.dsn:
            return self.dsn.driver
        return self.url.split(":", 1)[0]

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a connection config by parsing the DSN string.
        """

        parsed = parse_dsn(dsn)
        if not parsed.driver:
            raise ConfigurationError(f"DSN {parsed.redacted()!r} has no scheme")
        query = dict(parsed.query)

        parsed_timeout = _pop_float(query, "timeout")
        parsed_isolation_level = query.pop("isolation_level", None)
        options = _parse_option_values(query)
        options.update(kwargs.pop("options", None) or {})

        isolation_level = kwargs.pop("isolation_level", parsed_isolation_level)
        timeout = kwargs.pop("timeout", parsed_timeout)

        return cls(
            url=dsn,
            dsn=parsed,
            isolation_level=isolation_level,
            timeout=timeout,
            options=options or None,
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from an environment variable containing a DSN.
        """

        value = os.getenv(env_var)
        if not value:
            raise ConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    def redacted_dsn(self) -> str:
        """
        Return a DSN safe for logging (credentials removed).
        """

        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        """
        Describe the config source for diagnostics.
        """

        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


# ---------------------------------------------------------------------- #
# Row decoding and error translation helpers
# ---------------------------------------------------------------------- #


def storage_class_name(raw: Any) -> str:
    """
    Name the backend storage class of a fetched value for diagnostics.
    """
    if raw is None:
        return "NULL"
    if isinstance(raw, bool):
        return "BOOLEAN"
    if isinstance(raw, int):
        return "INTEGER"
    if isinstance(raw, float):
        return "REAL"
    if isinstance(raw, str):
        return "TEXT"
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return "BLOB"
    return type(raw).__name__


def _decode_value(raw: Any, data_type: DataType) -> Optional[Value]:
    is_integer = isinstance(raw, int) and not isinstance(raw, bool)
    if data_type is DataType.STRING and isinstance(raw, str):
        return Value(data_type, raw)
    if data_type is DataType.BYTES and isinstance(raw, (bytes, bytearray, memoryview)):
        return Value(data_type, bytes(raw))
    if data_type is DataType.INT64 and is_integer:
        return Value(data_type, raw)
    if data_type is DataType.FLOAT64 and (isinstance(raw, float) or is_integer):
        return Value(data_type, float(raw))
    if data_type is DataType.BOOL and (isinstance(raw, bool) or is_integer):
        return Value(data_type, bool(raw))
    return None


def decode_row(schema: Schema, raw_row: Sequence[Any]) -> Row:
    """
    Convert fetched column values into a row, checking each against the
    declared column type.
    """
    row: Row = []
    for index, data_type in enumerate(schema.column_types):
        raw = raw_row[index]
        value = _decode_value(raw, data_type)
        if value is None:
            raise UnexpectedTypeError(
                type_name=schema.type_name,
                attr_name=schema.field_name(index),
                table_name=schema.table_name,
                column_name=schema.column_name(index),
                expected_type=data_type,
                got_type=storage_class_name(raw),
            )
        row.append(value)
    return row


def missing_column_error(schema: Schema, raw_column: str) -> Optional[MissingColumnError]:
    """
    Resolve a column name from a backend error against ``schema``.
    """
    match = schema.find_column(raw_column)
    if match is None:
        return None
    column_name, index = match
    return MissingColumnError(
        type_name=schema.type_name,
        attr_name=schema.field_name(index),
        table_name=schema.table_name,
        column_name=column_name,
    )


def row_params(row: Sequence[Value]) -> list[Any]:
    return [value.to_sql() for value in row]
