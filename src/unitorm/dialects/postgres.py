"""
PostgreSQL dialect implementation.
"""

from __future__ import annotations

from typing import Final

from ..core.values import DataType
from .base import DialectCapabilities

_COLUMN_TYPES = {
    DataType.STRING: "TEXT",
    DataType.BYTES: "BYTEA",
    DataType.INT64: "BIGINT",
    DataType.FLOAT64: "DOUBLE PRECISION",
    DataType.BOOL: "BOOLEAN",
}


class PostgresDialect:
    """
    PostgreSQL dialect using percent positional parameters.
    """

    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_returning=True,
    )

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace('"', '""')
        return f'"{escaped}"'

    def format_table(self, table_name: str) -> str:
        return self.quote_identifier(table_name)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "%s"

    def column_type(self, data_type: DataType) -> str:
        return _COLUMN_TYPES[data_type]

    def identity_column_definition(self, column: str) -> str:
        return f"{self.quote_identifier(column)} BIGSERIAL PRIMARY KEY"

    def render_column_definition(self, column: str, column_type: str) -> str:
        return f"{self.quote_identifier(column)} {column_type}"

    def table_exists_sql(self) -> str:
        return (
            "SELECT 1 FROM information_schema.tables "
            "WHERE table_schema = current_schema() AND table_name = %s"
        )
