"""
Static per-type description of a table layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from ..errors import ObjectConfigurationError
from .values import DataType

IDENTITY_COLUMN = "id"


@dataclass(frozen=True)
class Schema:
    """
    Table name, type name and three parallel column lists for one object type.

    ``field_names`` are used for diagnostics, ``column_names`` for SQL and
    ``column_types`` for encoding and decoding; index ``i`` of each list refers
    to the same field.
    """

    table_name: str
    type_name: str
    field_names: Tuple[str, ...]
    column_names: Tuple[str, ...]
    column_types: Tuple[DataType, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "field_names", tuple(self.field_names))
        object.__setattr__(self, "column_names", tuple(self.column_names))
        object.__setattr__(self, "column_types", tuple(self.column_types))
        lengths = {len(self.field_names), len(self.column_names), len(self.column_types)}
        if len(lengths) != 1:
            raise ObjectConfigurationError(
                f"Schema for '{self.type_name}' has mismatched field, column and type lists"
            )
        if IDENTITY_COLUMN in self.column_names:
            raise ObjectConfigurationError(
                f"Column name '{IDENTITY_COLUMN}' is reserved for the identity of '{self.type_name}'"
            )

    @property
    def column_count(self) -> int:
        return len(self.column_types)

    def field_name(self, index: int) -> str:
        return self.field_names[index]

    def column_name(self, index: int) -> str:
        return self.column_names[index]

    def column_type(self, index: int) -> DataType:
        return self.column_types[index]

    def columns(self) -> Iterator[Tuple[str, str, DataType]]:
        """Yield ``(field_name, column_name, data_type)`` in column order."""
        return iter(zip(self.field_names, self.column_names, self.column_types))

    def column_name_list(self, separator: str = ", ") -> str:
        return separator.join(self.column_names)

    def update_column_list(self, placeholder: str = "?") -> str:
        return ", ".join(f"{column} = {placeholder}" for column in self.column_names)

    def text_description(self) -> str:
        pieces = [f"{IDENTITY_COLUMN} INTEGER PRIMARY KEY AUTOINCREMENT"]
        pieces.extend(
            f"{column} {data_type.sql_type}"
            for column, data_type in zip(self.column_names, self.column_types)
        )
        return ", ".join(pieces)

    def find_column(self, raw_name: str) -> Optional[Tuple[str, int]]:
        """
        Resolve a column name reported by the backend to a declared column.

        Backends may report the name with a table prefix or quoting, so an
        exact match is tried first and then a partial one.
        """
        for index, column in enumerate(self.column_names):
            if column == raw_name:
                return column, index
        for index, column in enumerate(self.column_names):
            if raw_name and raw_name in column:
                return column, index
        stripped = raw_name.strip("\"'`").rsplit(".", 1)[-1]
        if stripped != raw_name:
            return self.find_column(stripped)
        return None
