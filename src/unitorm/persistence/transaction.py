"""
Transaction engine: identity map plus unit of work over one storage transaction.
"""

from __future__ import annotations

from typing import Callable, Optional, Set, Type, TypeVar, Union

from ..core.object import Object, Storable
from ..core.schema import Schema
from ..core.values import ObjectId
from ..errors import NotFoundError, OrmError, TransactionError
from ..storage.base import StorageTransaction
from ..utils import get_logger
from .handle import Handle
from .identity_map import IdentityMap, ObjectState
from .unit_of_work import UnitOfWork

TObject = TypeVar("TObject", bound=Object)


class Transaction:
    """
    Caches every object created or fetched through it and writes the
    changed ones back on :meth:`commit`.

    Creates are written immediately, updates and deletes are deferred to
    commit. An object created and then deleted in the same transaction costs
    one insert and one delete.
    """

    def __init__(
        self,
        storage: StorageTransaction,
        *,
        on_close: Optional[Callable[["Transaction"], None]] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self._storage = storage
        self.correlation_id = correlation_id
        self._on_close = on_close
        self._active = True
        self._known_tables: Set[str] = set()
        self.identity_map = IdentityMap()
        self.unit_of_work = UnitOfWork(storage)
        self.logger = get_logger("persistence.transaction")

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._active:
            return
        if exc_type:
            self.rollback()
        else:
            self.commit()

    def __len__(self) -> int:
        return len(self.identity_map)

    @property
    def is_active(self) -> bool:
        return self._active

    # ------------------------------------------------------------------ #
    def create(self, obj: TObject) -> Handle[TObject]:
        self._ensure_active()
        if not isinstance(obj, Storable):
            raise TypeError(f"{type(obj).__name__} cannot be stored")
        if self.identity_map.tracks(obj):
            raise TransactionError(f"{obj!r} is already tracked by this transaction")

        schema = obj.describe()
        self._ensure_table(schema)
        object_id = self._storage.insert_row(schema, obj.as_row())
        entry = self.identity_map.add(object_id, obj)
        self.logger.debug("Created %s %s", schema.type_name, object_id)
        return Handle(entry, type(obj))

    def get(self, object_type: Type[TObject], object_id: Union[ObjectId, int]) -> Handle[TObject]:
        self._ensure_active()
        object_id = ObjectId.coerce(object_id)
        schema = object_type.describe()

        entry = self.identity_map.get(schema, object_id)
        if entry is not None:
            if entry.state.value is ObjectState.REMOVED:
                raise NotFoundError(object_id, schema.type_name)
            return Handle(entry, object_type)

        self._ensure_table(schema)
        row = self._storage.select_row(object_id, schema)
        obj = object_type.from_row(row)
        entry = self.identity_map.add(object_id, obj)
        self.logger.debug("Loaded %s %s", schema.type_name, object_id)
        return Handle(entry, object_type)

    def state_of(
        self, object_type: Type[TObject], object_id: Union[ObjectId, int]
    ) -> Optional[ObjectState]:
        """
        State of a cached identity, or ``None`` when it was never loaded here.
        """
        entry = self.identity_map.get(object_type.describe(), ObjectId.coerce(object_id))
        return entry.state.value if entry is not None else None

    # ------------------------------------------------------------------ #
    def commit(self) -> None:
        self._ensure_active()
        try:
            result = self.unit_of_work.flush(self.identity_map.entries())
            self._storage.commit()
        except Exception:
            self._abort()
            raise
        finally:
            self._finish()
        self.logger.info(
            "Committed transaction (%s updated, %s deleted)", result.updated, result.deleted
        )

    def rollback(self) -> None:
        self._ensure_active()
        try:
            self._storage.rollback()
        finally:
            self._finish()
        self.logger.info("Rolled back transaction")

    # ------------------------------------------------------------------ #
    def _ensure_active(self) -> None:
        if not self._active:
            raise TransactionError("Transaction has already been committed or rolled back.")

    def _ensure_table(self, schema: Schema) -> None:
        if schema.table_name in self._known_tables:
            return
        if not self._storage.table_exists(schema.table_name):
            self._storage.create_table(schema)
        self._known_tables.add(schema.table_name)

    def _abort(self) -> None:
        try:
            self._storage.rollback()
        except OrmError as exc:
            self.logger.warning("Rollback after failed commit also failed: %s", exc)

    def _finish(self) -> None:
        self._active = False
        self.identity_map.clear()
        self._known_tables.clear()
        if self._on_close is not None:
            self._on_close(self)
