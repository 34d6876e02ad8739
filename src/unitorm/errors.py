"""
Error hierarchy for unitorm.

``OrmError`` subclasses describe runtime data conditions a caller can recover
from (pick another identity, retry the transaction, migrate the table).
The remaining classes signal contract violations in application code and are
not meant to be caught in normal operation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .core.values import DataType, ObjectId


class OrmError(Exception):
    """Base class for recoverable unitorm errors."""


class ConfigurationError(OrmError):
    """Raised when connection configuration is invalid or incomplete."""


class StorageError(OrmError):
    """Raised for backend failures without a more specific translation."""


class NotFoundError(OrmError):
    """
    The identity has no live row, or it was removed earlier in the same
    transaction.
    """

    def __init__(self, object_id: "ObjectId", type_name: str) -> None:
        self.object_id = object_id
        self.type_name = type_name
        super().__init__(f"Object {type_name} with id {object_id} not found")


class LockConflictError(OrmError):
    """The backend reported that the database or table is locked."""

    def __init__(self, message: str = "Database is locked") -> None:
        super().__init__(message)


class MissingColumnError(OrmError):
    """
    A column declared by the object type does not exist in the stored table.
    """

    def __init__(
        self,
        *,
        type_name: str,
        attr_name: str,
        table_name: str,
        column_name: str,
    ) -> None:
        self.type_name = type_name
        self.attr_name = attr_name
        self.table_name = table_name
        self.column_name = column_name
        super().__init__(
            f"Field {type_name}.{attr_name} is mapped to column {column_name}, "
            f"which is missing from table {table_name}"
        )


class UnexpectedTypeError(OrmError):
    """
    A stored value has a backend type that disagrees with the declared column
    type.
    """

    def __init__(
        self,
        *,
        type_name: str,
        attr_name: str,
        table_name: str,
        column_name: str,
        expected_type: "DataType",
        got_type: str,
    ) -> None:
        self.type_name = type_name
        self.attr_name = attr_name
        self.table_name = table_name
        self.column_name = column_name
        self.expected_type = expected_type
        self.got_type = got_type
        super().__init__(
            f"Field {type_name}.{attr_name} expected {expected_type.name} in column "
            f"{table_name}.{column_name}, found {got_type}"
        )


# Programmer errors ------------------------------------------------------


class ObjectConfigurationError(Exception):
    """Raised when an object class or schema is misconfigured."""


class TransactionError(RuntimeError):
    """Raised when a transaction is used after it ended or opened twice."""


class BorrowError(RuntimeError):
    """Raised when a handle borrow violates exclusivity or targets a removed object."""


class ValueTypeError(TypeError):
    """Raised when a value is extracted as, or built from, the wrong kind."""


class ObjectTypeError(TypeError):
    """Raised when a cached object is not an instance of the requested type."""

    def __init__(self, expected: type, actual: Any) -> None:
        self.expected = expected
        self.actual = type(actual)
        super().__init__(
            f"Cached object is {self.actual.__name__}, not {expected.__name__}"
        )
