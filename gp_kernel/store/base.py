"""
Entity store contract (``gp_kernel.store.base``).

Responsibility
--------------
The single owner of authoritative records.  Commands mutate records only
through ``add`` / ``replace`` / ``delete``; queries read a ``StoreSnapshot``.

Records are frozen dataclasses exposing ``id: UUID`` and ``version: int``.
The store, not the caller, assigns versions: ``add`` stores version 1 and
each successful ``replace`` stores ``expected_version + 1``.

Invariants enforced
-------------------
* Compare-and-set: ``replace`` and ``delete`` succeed only if the stored
  version equals ``expected_version``; otherwise
  ``ConcurrentModificationError`` and nothing is written.
* Ids are unique per record type.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar
from uuid import UUID

T = TypeVar("T")


class EntityStore(Protocol):
    """Repository contract shared by the in-memory and SQL stores."""

    def find(self, entity_type: type[T], entity_id: UUID) -> T | None:
        """Return the record, or None."""
        ...

    def get(self, entity_type: type[T], entity_id: UUID) -> T:
        """Return the record or raise ``EntityNotFoundError``."""
        ...

    def add(self, record: T) -> T:
        """Insert a new record at version 1 and return the stored copy."""
        ...

    def replace(self, record: T, *, expected_version: int) -> T:
        """Compare-and-set write; returns the stored copy."""
        ...

    def delete(self, entity_type: type[Any], entity_id: UUID, *, expected_version: int) -> None:
        """Compare-and-set delete."""
        ...

    def list(
        self,
        entity_type: type[T],
        predicate: Callable[[T], bool] | None = None,
    ) -> list[T]:
        """Return matching records of one type."""
        ...

    def snapshot(self) -> "StoreSnapshot":
        """Return a consistent read-only view of every record."""
        ...


@dataclass(frozen=True)
class StoreSnapshot:
    """Immutable point-in-time view used by the aggregation queries."""

    records: Mapping[type, tuple[Any, ...]] = field(default_factory=dict)

    def of(self, entity_type: type[T]) -> tuple[T, ...]:
        return self.records.get(entity_type, ())

    def by_id(self, entity_type: type[T]) -> dict[UUID, T]:
        return {r.id: r for r in self.of(entity_type)}

    @classmethod
    def from_records(cls, groups: Mapping[type, Iterable[Any]]) -> "StoreSnapshot":
        return cls(records={t: tuple(rs) for t, rs in groups.items()})


def entity_name(entity_type: type) -> str:
    """Name used in errors and logs for a record type."""
    return entity_type.__name__
