import sqlite3

import pytest

from unitorm import (
    Connection,
    IntegerField,
    MissingColumnError,
    NotFoundError,
    Object,
    ObjectId,
    ObjectState,
    StringField,
    UnexpectedTypeError,
)


class Item(Object):
    name = StringField()
    count = IntegerField(default=0)


def read_rows(path):
    raw = sqlite3.connect(str(path))
    try:
        return raw.execute("SELECT id, name, count FROM Item ORDER BY id").fetchall()
    finally:
        raw.close()


def test_modified_object_is_written_on_commit(tmp_path):
    path = tmp_path / "items.db"
    with Connection.open_sqlite_file(path) as connection:
        with connection.transaction() as tx:
            handle = tx.create(Item(name="x", count=1))
            assert handle.id == ObjectId(1)
            assert handle.state is ObjectState.CLEAN
            with handle.borrow_mut() as item:
                item.count = 2
            assert handle.state is ObjectState.MODIFIED

        assert read_rows(path) == [(1, "x", 2)]

        with connection.transaction() as tx:
            fetched = tx.get(Item, 1)
            assert fetched.state is ObjectState.CLEAN
            with fetched.borrow() as item:
                assert (item.name, item.count) == ("x", 2)


def test_deleted_object_is_gone_after_commit(tmp_path):
    path = tmp_path / "items.db"
    with Connection.open_sqlite_file(path) as connection:
        with connection.transaction() as tx:
            tx.create(Item(name="a", count=1))
            second = tx.create(Item(name="b"))
            assert second.id == ObjectId(2)
            second.delete()
            assert second.state is ObjectState.REMOVED

        assert read_rows(path) == [(1, "a", 1)]

        with connection.transaction() as tx:
            with pytest.raises(NotFoundError):
                tx.get(Item, 2)


def test_rolled_back_changes_are_not_visible(tmp_path):
    with Connection.open_sqlite_file(tmp_path / "items.db") as connection:
        with connection.transaction() as tx:
            tx.create(Item(name="keep", count=1))

        with pytest.raises(RuntimeError):
            with connection.transaction() as tx:
                with tx.get(Item, 1).borrow_mut() as item:
                    item.count = 100
                tx.create(Item(name="discard"))
                raise RuntimeError("abort")

        with connection.transaction() as tx:
            with tx.get(Item, 1).borrow() as item:
                assert item.count == 1
            with pytest.raises(NotFoundError):
                tx.get(Item, 2)


def test_missing_column_through_transaction(tmp_path):
    path = tmp_path / "legacy.db"
    raw = sqlite3.connect(str(path))
    raw.execute("CREATE TABLE Item (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)")
    raw.execute("INSERT INTO Item (name) VALUES ('old')")
    raw.commit()
    raw.close()

    with Connection.open_sqlite_file(path) as connection:
        tx = connection.new_transaction()
        with pytest.raises(MissingColumnError) as excinfo:
            tx.get(Item, 1)
        error = excinfo.value
        assert (error.type_name, error.attr_name, error.table_name, error.column_name) == (
            "Item",
            "count",
            "Item",
            "count",
        )
        tx.rollback()


def test_unexpected_type_through_transaction(tmp_path):
    path = tmp_path / "drifted.db"
    raw = sqlite3.connect(str(path))
    raw.execute("CREATE TABLE Item (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, count TEXT)")
    raw.execute("INSERT INTO Item (name, count) VALUES ('old', 'many')")
    raw.commit()
    raw.close()

    with Connection.open_sqlite_file(path) as connection:
        with pytest.raises(UnexpectedTypeError) as excinfo:
            with connection.transaction() as tx:
                tx.get(Item, 1)
        assert excinfo.value.expected_type.name == "INT64"
        assert excinfo.value.got_type == "TEXT"


def test_in_memory_database_round_trip():
    with Connection.open_in_memory() as connection:
        with connection.transaction() as tx:
            handle = tx.create(Item(name="mem", count=3))
            object_id = handle.id
        with connection.transaction() as tx:
            with tx.get(Item, object_id).borrow() as item:
                assert item == Item(name="mem", count=3)
