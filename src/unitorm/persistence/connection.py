"""
Connection management handing out one transaction at a time.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Generator, Optional, Union

from ..errors import ConfigurationError, TransactionError
from ..storage.base import ConnectionConfig, StorageBackend
from ..storage.postgres import PostgresBackend
from ..storage.sqlite import SQLiteBackend
from ..utils import get_logger, set_correlation_id
from .transaction import Transaction

DEFAULT_DSN_ENV = "UNITORM_DSN"

_BACKENDS = {
    "sqlite": SQLiteBackend,
    "postgres": PostgresBackend,
    "postgresql": PostgresBackend,
}


class Connection:
    """
    Owns a storage backend connection and the transaction currently open on it.
    """

    def __init__(self, backend: StorageBackend, config: ConnectionConfig) -> None:
        self.backend = backend
        self.config = config
        self.logger = get_logger("persistence.connection")
        self._transaction: Optional[Transaction] = None
        self.backend.connect(config)

    # ------------------------------------------------------------------ #
    # Constructors
    # ------------------------------------------------------------------ #
    @classmethod
    def open_sqlite_file(cls, path: Union[str, os.PathLike[str]], **kwargs) -> "Connection":
        config = ConnectionConfig(url=os.fspath(path), **kwargs)
        return cls(SQLiteBackend(), config)

    @classmethod
    def open_in_memory(cls) -> "Connection":
        return cls(SQLiteBackend(), ConnectionConfig(url=":memory:"))

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> "Connection":
        backend_cls = _BACKENDS.get(config.scheme.lower())
        if backend_cls is None:
            raise ConfigurationError(
                f"No storage backend for {config.redacted_dsn()!r}; "
                f"supported schemes: {', '.join(sorted(_BACKENDS))}"
            )
        return cls(backend_cls(), config)

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs) -> "Connection":
        return cls.from_config(ConnectionConfig.from_dsn(dsn, **kwargs))

    @classmethod
    def from_env(cls, env_var: str = DEFAULT_DSN_ENV, **kwargs) -> "Connection":
        return cls.from_config(ConnectionConfig.from_env(env_var, **kwargs))

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    def new_transaction(self) -> Transaction:
        if self._transaction is not None:
            raise TransactionError("A transaction is already active on this connection.")
        storage = self.backend.begin()
        # log records emitted while this transaction is open share one correlation id
        correlation_id = set_correlation_id()
        self._transaction = Transaction(
            storage, on_close=self._release, correlation_id=correlation_id
        )
        self.logger.debug("Started transaction on %s", self.config.descriptive_label())
        return self._transaction

    @contextmanager
    def transaction(self) -> Generator[Transaction, None, None]:
        """
        Commit on normal exit, roll back if the block raises.
        """
        with self.new_transaction() as transaction:
            yield transaction

    def close(self) -> None:
        try:
            if self._transaction is not None:
                self.logger.warning("Closing connection with an open transaction; rolling back.")
                self._transaction.rollback()
        finally:
            self.backend.close()

    def _release(self, transaction: Transaction) -> None:
        if self._transaction is transaction:
            self._transaction = None
