"""
Statement builder converting a schema into dialect-specific SQL.
"""

from __future__ import annotations

from ..core.schema import IDENTITY_COLUMN, Schema
from ..dialects.base import Dialect


class SchemaBuilder:
    """
    Produces the SQL text for single-row operations keyed by identity.
    """

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect

    def create_table_sql(self, schema: Schema) -> str:
        pieces = [self.dialect.identity_column_definition(IDENTITY_COLUMN)]
        pieces.extend(
            self.dialect.render_column_definition(column, self.dialect.column_type(data_type))
            for _, column, data_type in schema.columns()
        )
        table_name = self.dialect.format_table(schema.table_name)
        return f"CREATE TABLE {table_name} ({', '.join(pieces)})"

    def insert_sql(self, schema: Schema) -> str:
        table_name = self.dialect.format_table(schema.table_name)
        if schema.column_count == 0:
            sql = f"INSERT INTO {table_name} DEFAULT VALUES"
        else:
            placeholders = ", ".join(
                self.dialect.parameter_placeholder(i) for i in range(schema.column_count)
            )
            sql = f"INSERT INTO {table_name} ({self._column_list(schema)}) VALUES ({placeholders})"
        if self.dialect.capabilities.supports_returning:
            sql = f"{sql} RETURNING {self.dialect.quote_identifier(IDENTITY_COLUMN)}"
        return sql

    def select_sql(self, schema: Schema) -> str:
        table_name = self.dialect.format_table(schema.table_name)
        if schema.column_count == 0:
            select_list = self.dialect.quote_identifier(IDENTITY_COLUMN)
        else:
            select_list = self._column_list(schema)
        return f"SELECT {select_list} FROM {table_name} WHERE {self._identity_clause()}"

    def update_sql(self, schema: Schema) -> str:
        table_name = self.dialect.format_table(schema.table_name)
        if schema.column_count == 0:
            # nothing to set, keep the statement a valid no-op on the row
            set_list = f"{self.dialect.quote_identifier(IDENTITY_COLUMN)} = {self.dialect.quote_identifier(IDENTITY_COLUMN)}"
        else:
            set_list = ", ".join(
                f"{self.dialect.quote_identifier(column)} = {self.dialect.parameter_placeholder(i)}"
                for i, column in enumerate(schema.column_names)
            )
        return f"UPDATE {table_name} SET {set_list} WHERE {self._identity_clause()}"

    def delete_sql(self, schema: Schema) -> str:
        table_name = self.dialect.format_table(schema.table_name)
        return f"DELETE FROM {table_name} WHERE {self._identity_clause()}"

    def table_exists_sql(self) -> str:
        return self.dialect.table_exists_sql()

    def _column_list(self, schema: Schema) -> str:
        return ", ".join(self.dialect.quote_identifier(column) for column in schema.column_names)

    def _identity_clause(self) -> str:
        return f"{self.dialect.quote_identifier(IDENTITY_COLUMN)} = {self.dialect.parameter_placeholder()}"
