import logging

import pytest

from unitorm import (
    ConfigurationError,
    Connection,
    IntegerField,
    NotFoundError,
    Object,
    StringField,
    TransactionError,
)
from unitorm.errors import StorageError
from unitorm.storage import ConnectionConfig, SQLiteBackend
from unitorm.utils import get_correlation_id


class Note(Object):
    body = StringField()
    rank = IntegerField(default=0)


def test_only_one_transaction_at_a_time(tmp_path):
    with Connection.open_sqlite_file(tmp_path / "one.db") as connection:
        tx = connection.new_transaction()
        with pytest.raises(TransactionError):
            connection.new_transaction()
        tx.commit()
        connection.new_transaction().rollback()


def test_from_dsn_selects_sqlite_backend(tmp_path):
    dsn = f"sqlite:///{tmp_path / 'dsn.db'}?timeout=1.5"
    with Connection.from_dsn(dsn) as connection:
        assert isinstance(connection.backend, SQLiteBackend)
        assert connection.config.timeout == 1.5
        with connection.transaction() as tx:
            tx.create(Note(body="hello"))


def test_from_env_reads_default_variable(monkeypatch, tmp_path):
    monkeypatch.setenv("UNITORM_DSN", f"sqlite:///{tmp_path / 'env.db'}")
    with Connection.from_env() as connection:
        assert connection.config.source == "UNITORM_DSN"


def test_unknown_scheme_is_rejected():
    with pytest.raises(ConfigurationError):
        Connection.from_dsn("oracle://scott:tiger@db/orcl")


def test_from_config_with_isolation_level(tmp_path):
    config = ConnectionConfig(url=str(tmp_path / "iso.db"), isolation_level="immediate")
    with Connection(SQLiteBackend(), config) as connection:
        with connection.transaction() as tx:
            tx.create(Note(body="locked early"))


def test_close_rolls_back_open_transaction(tmp_path, caplog):
    caplog.set_level(logging.WARNING, logger="unitorm.persistence.connection")
    path = tmp_path / "close.db"
    connection = Connection.open_sqlite_file(path)
    with connection.transaction() as tx:
        tx.create(Note(body="kept"))
    tx = connection.new_transaction()
    tx.create(Note(body="dropped"))
    connection.close()
    assert not tx.is_active
    assert any("open transaction" in r.getMessage() for r in caplog.records)

    with Connection.open_sqlite_file(path) as reopened:
        with reopened.transaction() as check:
            check.get(Note, 1)
            with pytest.raises(NotFoundError):
                check.get(Note, 2)


class StubBackend:
    def __init__(self, storage):
        self.storage = storage
        self.closed = False

    def connect(self, config):
        return self

    def begin(self):
        return self.storage

    def close(self):
        self.closed = True


def test_close_releases_backend_when_rollback_fails(storage):
    storage.fail_on = "rollback"
    backend = StubBackend(storage)
    connection = Connection(backend, ConnectionConfig(url=":memory:"))
    tx = connection.new_transaction()
    with pytest.raises(StorageError):
        connection.close()
    assert backend.closed
    assert not tx.is_active


def test_each_transaction_gets_its_own_correlation_id(storage):
    connection = Connection(StubBackend(storage), ConnectionConfig(url=":memory:"))
    first = connection.new_transaction()
    assert first.correlation_id == get_correlation_id()
    first.commit()
    second = connection.new_transaction()
    assert second.correlation_id == get_correlation_id()
    assert second.correlation_id != first.correlation_id
    second.rollback()
    connection.close()
