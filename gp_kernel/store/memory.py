"""
In-memory entity store (``gp_kernel.store.memory``).

Default runtime store.  ID-keyed dicts per record type behind one lock, so
the version check and the write of ``replace`` / ``delete`` happen as one
atomic step.  Readers get copies (records are frozen, so the tuples are
enough).
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Callable
from typing import Any, TypeVar
from uuid import UUID

from gp_kernel.exceptions import (
    ConcurrentModificationError,
    EntityNotFoundError,
    InvariantViolationError,
)
from gp_kernel.logging_config import get_logger
from gp_kernel.store.base import StoreSnapshot, entity_name

logger = get_logger("store.memory")

T = TypeVar("T")


class InMemoryEntityStore:
    """Thread-safe, version-checked record store."""

    def __init__(self) -> None:
        self._tables: dict[type, dict[UUID, Any]] = {}
        self._lock = threading.RLock()

    def _table(self, entity_type: type) -> dict[UUID, Any]:
        return self._tables.setdefault(entity_type, {})

    def find(self, entity_type: type[T], entity_id: UUID) -> T | None:
        with self._lock:
            return self._table(entity_type).get(entity_id)

    def get(self, entity_type: type[T], entity_id: UUID) -> T:
        record = self.find(entity_type, entity_id)
        if record is None:
            raise EntityNotFoundError(entity_name(entity_type), entity_id)
        return record

    def add(self, record: T) -> T:
        entity_type = type(record)
        with self._lock:
            table = self._table(entity_type)
            if record.id in table:
                raise InvariantViolationError(
                    "unique_id",
                    f"{entity_name(entity_type)} {record.id} already stored",
                )
            stored = dataclasses.replace(record, version=1)
            table[record.id] = stored
        logger.debug(
            "record_added",
            extra={"entity_type": entity_name(entity_type), "entity_id": str(record.id)},
        )
        return stored

    def replace(self, record: T, *, expected_version: int) -> T:
        entity_type = type(record)
        with self._lock:
            table = self._table(entity_type)
            current = table.get(record.id)
            if current is None:
                raise EntityNotFoundError(entity_name(entity_type), record.id)
            if current.version != expected_version:
                raise ConcurrentModificationError(
                    entity_name(entity_type), record.id, expected_version,
                )
            stored = dataclasses.replace(record, version=expected_version + 1)
            table[record.id] = stored
        logger.debug(
            "record_replaced",
            extra={
                "entity_type": entity_name(entity_type),
                "entity_id": str(record.id),
                "version": stored.version,
            },
        )
        return stored

    def delete(self, entity_type: type[Any], entity_id: UUID, *, expected_version: int) -> None:
        with self._lock:
            table = self._table(entity_type)
            current = table.get(entity_id)
            if current is None:
                raise EntityNotFoundError(entity_name(entity_type), entity_id)
            if current.version != expected_version:
                raise ConcurrentModificationError(
                    entity_name(entity_type), entity_id, expected_version,
                )
            del table[entity_id]
        logger.debug(
            "record_deleted",
            extra={"entity_type": entity_name(entity_type), "entity_id": str(entity_id)},
        )

    def list(
        self,
        entity_type: type[T],
        predicate: Callable[[T], bool] | None = None,
    ) -> list[T]:
        with self._lock:
            records = list(self._table(entity_type).values())
        if predicate is None:
            return records
        return [r for r in records if predicate(r)]

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot.from_records(
                {t: list(table.values()) for t, table in self._tables.items()}
            )
