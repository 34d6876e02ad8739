"""
Storage backends implementing the storage-transaction interface.
"""

from .base import ConnectionConfig, StorageBackend, StorageTransaction, decode_row
from .postgres import PostgresBackend, PostgresStorageTransaction
from .sqlite import SQLiteBackend, SQLiteStorageTransaction

__all__ = [
    "ConnectionConfig",
    "PostgresBackend",
    "PostgresStorageTransaction",
    "SQLiteBackend",
    "SQLiteStorageTransaction",
    "StorageBackend",
    "StorageTransaction",
    "decode_row",
]
