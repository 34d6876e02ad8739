"""
Typed handles over cached objects.
"""

from __future__ import annotations

from typing import Any, Generic, Type, TypeVar

from ..core.values import ObjectId
from ..errors import BorrowError, ObjectTypeError, TransactionError
from .identity_map import BorrowCell, CacheEntry, ObjectState

T = TypeVar("T")


class Ref(Generic[T]):
    """
    Shared borrow of a cached object. Release it by leaving the ``with``
    block or calling :meth:`release`.
    """

    def __init__(self, cell: BorrowCell, value: T) -> None:
        self._cell = cell
        self._value = value
        self._released = False

    @property
    def value(self) -> T:
        if self._released:
            raise BorrowError("borrow already released")
        return self._value

    def release(self) -> None:
        if not self._released:
            self._released = True
            self._cell.release_shared()

    def __enter__(self) -> T:
        return self.value

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class RefMut(Ref[T]):
    """
    Exclusive borrow of a cached object.
    """

    def release(self) -> None:
        if not self._released:
            self._released = True
            self._cell.release_exclusive()


class Handle(Generic[T]):
    """
    Typed façade over one cache entry of a transaction.

    Clones share the entry, so state changes made through one handle are
    visible through every other handle for the same identity.
    """

    def __init__(self, entry: CacheEntry, object_type: Type[T]) -> None:
        self._entry = entry
        self._object_type = object_type

    def __repr__(self) -> str:
        return (
            f"<Handle {self._object_type.__name__} id={self._entry.object_id} "
            f"state={self._entry.state.value.name}>"
        )

    @property
    def id(self) -> ObjectId:
        return self._entry.object_id

    @property
    def state(self) -> ObjectState:
        return self._entry.state.value

    def clone(self) -> "Handle[T]":
        return Handle(self._entry, self._object_type)

    __copy__ = clone

    def _ensure_attached(self) -> None:
        if self._entry.detached:
            raise TransactionError("the transaction owning this handle has ended")

    def _ensure_live(self) -> None:
        self._ensure_attached()
        if self._entry.state.value is ObjectState.REMOVED:
            raise BorrowError("cannot borrow a removed object")

    def _downcast(self) -> T:
        payload: Any = self._entry.cell.payload
        if not isinstance(payload, self._object_type):
            raise ObjectTypeError(self._object_type, payload)
        return payload

    def borrow(self) -> Ref[T]:
        self._ensure_live()
        value = self._downcast()
        self._entry.cell.acquire_shared()
        return Ref(self._entry.cell, value)

    def borrow_mut(self) -> RefMut[T]:
        self._ensure_live()
        value = self._downcast()
        self._entry.cell.acquire_exclusive()
        self._entry.state.value = ObjectState.MODIFIED
        return RefMut(self._entry.cell, value)

    def delete(self) -> None:
        self._ensure_attached()
        if self._entry.state.value is ObjectState.REMOVED:
            raise BorrowError("object is already removed")
        if self._entry.cell.is_borrowed:
            raise BorrowError("cannot delete a borrowed object")
        self._entry.state.value = ObjectState.REMOVED
