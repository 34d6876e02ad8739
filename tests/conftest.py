from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from unitorm.core import ObjectId, Schema, Value
from unitorm.errors import NotFoundError, StorageError


class RecordingStorage:
    """
    In-memory storage transaction recording every call made against it.
    """

    def __init__(self) -> None:
        self.tables: Dict[str, Dict[int, List[Value]]] = {}
        self.calls: List[Tuple[str, Any]] = []
        self.committed = False
        self.rolled_back = False
        self.fail_on: Optional[str] = None
        self._next_ids: Dict[str, int] = {}

    def _record(self, name: str, detail: Any = None) -> None:
        self.calls.append((name, detail))
        if self.fail_on == name:
            raise StorageError(f"{name} failed")

    def table_exists(self, table_name: str) -> bool:
        self._record("table_exists", table_name)
        return table_name in self.tables

    def create_table(self, schema: Schema) -> None:
        self._record("create_table", schema.table_name)
        self.tables[schema.table_name] = {}

    def insert_row(self, schema: Schema, row: Sequence[Value]) -> ObjectId:
        self._record("insert_row", schema.table_name)
        next_id = self._next_ids.get(schema.table_name, 1)
        self._next_ids[schema.table_name] = next_id + 1
        self.tables[schema.table_name][next_id] = list(row)
        return ObjectId(next_id)

    def update_row(self, object_id: ObjectId, schema: Schema, row: Sequence[Value]) -> None:
        self._record("update_row", (schema.table_name, int(object_id)))
        self.tables[schema.table_name][int(object_id)] = list(row)

    def select_row(self, object_id: ObjectId, schema: Schema) -> List[Value]:
        self._record("select_row", (schema.table_name, int(object_id)))
        try:
            return list(self.tables[schema.table_name][int(object_id)])
        except KeyError:
            raise NotFoundError(object_id, schema.type_name) from None

    def delete_row(self, object_id: ObjectId, schema: Schema) -> None:
        self._record("delete_row", (schema.table_name, int(object_id)))
        self.tables[schema.table_name].pop(int(object_id), None)

    def commit(self) -> None:
        self._record("commit")
        self.committed = True

    def rollback(self) -> None:
        self._record("rollback")
        self.rolled_back = True

    def writes(self) -> List[Tuple[str, Any]]:
        """Calls that change stored rows, in order."""
        return [call for call in self.calls if call[0] in ("insert_row", "update_row", "delete_row")]


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()
