"""
Dialect strategy interfaces describing SQL rendering behaviors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..core.values import DataType


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.
    """

    supports_returning: bool = False


class Dialect(Protocol):
    """
    Strategy interface consumed by the statement builder and storage backends.
    """

    @property
    def capabilities(self) -> DialectCapabilities: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def format_table(self, table_name: str) -> str: ...

    def parameter_placeholder(self, position: int | None = None) -> str: ...

    def column_type(self, data_type: DataType) -> str: ...

    def identity_column_definition(self, column: str) -> str: ...

    def render_column_definition(self, column: str, column_type: str) -> str: ...

    def table_exists_sql(self) -> str: ...
