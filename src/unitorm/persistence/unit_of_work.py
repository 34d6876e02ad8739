"""
Unit of Work applying the pending writes of a transaction's cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from ..storage.base import StorageTransaction
from ..utils import get_logger
from .identity_map import CacheEntry, ObjectState


@dataclass
class FlushResult:
    updated: int = 0
    deleted: int = 0


class UnitOfWork:
    """
    Turns entry states into storage writes: one update per modified entry,
    one delete per removed entry, nothing for clean ones.
    """

    def __init__(self, storage: StorageTransaction) -> None:
        self.storage = storage
        self.logger = get_logger("persistence.unit_of_work")

    @staticmethod
    def pending(entries: Iterable[CacheEntry]) -> List[CacheEntry]:
        return [entry for entry in entries if entry.state.value is not ObjectState.CLEAN]

    def flush(self, entries: Iterable[CacheEntry]) -> FlushResult:
        result = FlushResult()
        for entry in self.pending(entries):
            if entry.state.value is ObjectState.MODIFIED:
                self._persist_dirty(entry)
                result.updated += 1
            else:
                self._persist_deleted(entry)
                result.deleted += 1
        self.logger.debug(
            "Flushed %s updates and %s deletes", result.updated, result.deleted
        )
        return result

    def _persist_dirty(self, entry: CacheEntry) -> None:
        cell = entry.cell
        cell.acquire_shared()
        try:
            row = cell.payload.as_row()
        finally:
            cell.release_shared()
        self.storage.update_row(entry.object_id, entry.schema, row)

    def _persist_deleted(self, entry: CacheEntry) -> None:
        self.storage.delete_row(entry.object_id, entry.schema)
