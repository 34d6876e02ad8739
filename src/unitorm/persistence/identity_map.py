"""
Identity map ensuring a single in-memory instance per stored row.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from ..core.object import Storable
from ..core.schema import Schema
from ..core.values import ObjectId
from ..errors import BorrowError


class ObjectState(Enum):
    CLEAN = "clean"
    MODIFIED = "modified"
    REMOVED = "removed"


class StateCell:
    """
    Shared, mutable holder for an entry's state, readable without borrowing
    the payload.
    """

    __slots__ = ("value",)

    def __init__(self, value: ObjectState = ObjectState.CLEAN) -> None:
        self.value = value


class BorrowCell:
    """
    Payload holder enforcing one writer or any number of readers at a time.

    Violations raise :class:`BorrowError` at acquire time.
    """

    __slots__ = ("payload", "_readers", "_writer")

    def __init__(self, payload: Storable) -> None:
        self.payload = payload
        self._readers = 0
        self._writer = False

    @property
    def is_borrowed(self) -> bool:
        return self._writer or self._readers > 0

    def acquire_shared(self) -> None:
        if self._writer:
            raise BorrowError("already mutably borrowed")
        self._readers += 1

    def release_shared(self) -> None:
        self._readers -= 1

    def acquire_exclusive(self) -> None:
        if self._writer:
            raise BorrowError("already mutably borrowed")
        if self._readers:
            raise BorrowError("already borrowed")
        self._writer = True

    def release_exclusive(self) -> None:
        self._writer = False


@dataclass
class CacheEntry:
    object_id: ObjectId
    schema: Schema
    cell: BorrowCell
    state: StateCell
    detached: bool = False


CacheKey = Tuple[str, ObjectId]


class IdentityMap:
    """
    Stores cache entries keyed by (table name, identity).
    """

    def __init__(self) -> None:
        self._store: Dict[CacheKey, CacheEntry] = {}
        self._payload_ids: set[int] = set()

    @staticmethod
    def _make_key(schema: Schema, object_id: ObjectId) -> CacheKey:
        return (schema.table_name, object_id)

    def add(self, object_id: ObjectId, payload: Storable) -> CacheEntry:
        schema = payload.describe()
        entry = CacheEntry(
            object_id=object_id,
            schema=schema,
            cell=BorrowCell(payload),
            state=StateCell(ObjectState.CLEAN),
        )
        self._store[self._make_key(schema, object_id)] = entry
        self._payload_ids.add(id(payload))
        return entry

    def get(self, schema: Schema, object_id: ObjectId) -> Optional[CacheEntry]:
        return self._store.get(self._make_key(schema, object_id))

    def tracks(self, payload: Storable) -> bool:
        return id(payload) in self._payload_ids

    def entries(self) -> Iterator[CacheEntry]:
        return iter(list(self._store.values()))

    def clear(self) -> None:
        for entry in self._store.values():
            entry.detached = True
        self._store.clear()
        self._payload_ids.clear()

    def __len__(self) -> int:
        return len(self._store)
