"""
unitorm public package initialization.

Typed objects get persistent identity through a :class:`Transaction` that
caches them by identity and writes back only what changed on commit.
"""

from .core import (  # noqa: F401
    BooleanField,
    BytesField,
    DataType,
    FloatField,
    IntegerField,
    Object,
    ObjectId,
    Schema,
    StringField,
    Value,
)
from .errors import (  # noqa: F401
    BorrowError,
    ConfigurationError,
    LockConflictError,
    MissingColumnError,
    NotFoundError,
    ObjectConfigurationError,
    ObjectTypeError,
    OrmError,
    StorageError,
    TransactionError,
    UnexpectedTypeError,
    ValueTypeError,
)
from .persistence import Connection, Handle, ObjectState, Transaction  # noqa: F401
from .storage import ConnectionConfig  # noqa: F401

__all__ = [
    "BooleanField",
    "BorrowError",
    "BytesField",
    "ConfigurationError",
    "Connection",
    "ConnectionConfig",
    "DataType",
    "FloatField",
    "Handle",
    "IntegerField",
    "LockConflictError",
    "MissingColumnError",
    "NotFoundError",
    "Object",
    "ObjectConfigurationError",
    "ObjectId",
    "ObjectState",
    "ObjectTypeError",
    "OrmError",
    "Schema",
    "StorageError",
    "StringField",
    "Transaction",
    "TransactionError",
    "UnexpectedTypeError",
    "Value",
    "ValueTypeError",
]
