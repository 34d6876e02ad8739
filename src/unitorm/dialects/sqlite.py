"""
SQLite dialect implementation.
"""

from __future__ import annotations

from typing import Final

from ..core.values import DataType
from .base import DialectCapabilities


class SQLiteDialect:
    """
    SQLite dialect using qmark param style and minimal capabilities.
    """

    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_returning=False,
    )

    def quote_identifier(self, identifier: str) -> str:
        # SQLite reads an unknown double-quoted name as a string literal, backticks never are
        escaped = identifier.replace("`", "``")
        return f"`{escaped}`"

    def format_table(self, table_name: str) -> str:
        return self.quote_identifier(table_name)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return "?"

    def column_type(self, data_type: DataType) -> str:
        return data_type.sql_type

    def identity_column_definition(self, column: str) -> str:
        return f"{self.quote_identifier(column)} INTEGER PRIMARY KEY AUTOINCREMENT"

    def render_column_definition(self, column: str, column_type: str) -> str:
        return f"{self.quote_identifier(column)} {column_type}"

    def table_exists_sql(self) -> str:
        return "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?"
