"""
gp_services.sql_store -- SQLAlchemy-backed entity store.

Responsibility:
    Implement the ``EntityStore`` protocol on top of the module ORM models.
    Each call runs in its own ``session_scope`` so a write is committed (or
    rolled back) before the call returns.

Architecture position:
    Services layer.  Uses the DTO -> model map from
    ``gp_modules._orm_registry``.

Invariants enforced:
    - ``replace`` is ``UPDATE ... WHERE id = :id AND version = :expected``;
      a row count of 0 means the record is gone (``EntityNotFoundError``)
      or changed (``ConcurrentModificationError``).
    - ``delete`` uses the same version predicate.
    - ``add`` always stores version 1.

Failure modes:
    - KeyError for a record type with no registered ORM model.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, sessionmaker

from gp_kernel.db.engine import session_scope
from gp_kernel.exceptions import (
    ConcurrentModificationError,
    EntityNotFoundError,
    InvariantViolationError,
)
from gp_kernel.logging_config import get_logger
from gp_kernel.store.base import StoreSnapshot, entity_name
from gp_modules._orm_registry import dto_model_map

logger = get_logger("services.sql_store")

T = TypeVar("T")


class SqlEntityStore:
    """Version-checked record store on a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._factory = session_factory
        self._models = dto_model_map()

    def _model(self, entity_type: type) -> Any:
        return self._models[entity_type]

    def find(self, entity_type: type[T], entity_id: UUID) -> T | None:
        model = self._model(entity_type)
        with session_scope(self._factory) as session:
            row = session.get(model, entity_id)
            return row.to_dto() if row is not None else None

    def get(self, entity_type: type[T], entity_id: UUID) -> T:
        record = self.find(entity_type, entity_id)
        if record is None:
            raise EntityNotFoundError(entity_name(entity_type), entity_id)
        return record

    def add(self, record: T) -> T:
        entity_type = type(record)
        model = self._model(entity_type)
        stored = dataclasses.replace(record, version=1)
        with session_scope(self._factory) as session:
            if session.get(model, record.id) is not None:
                raise InvariantViolationError(
                    "unique_id",
                    f"{entity_name(entity_type)} {record.id} already stored",
                )
            session.add(model.from_dto(stored))
        logger.debug(
            "record_added",
            extra={"entity_type": entity_name(entity_type), "entity_id": str(record.id)},
        )
        return stored

    def replace(self, record: T, *, expected_version: int) -> T:
        entity_type = type(record)
        model = self._model(entity_type)
        stored = dataclasses.replace(record, version=expected_version + 1)
        values = model.column_values(stored)
        with session_scope(self._factory) as session:
            result = session.execute(
                update(model)
                .where(model.id == record.id, model.version == expected_version)
                .values(**values, version=expected_version + 1)
            )
            if result.rowcount == 0:
                self._raise_missing_or_stale(session, entity_type, record.id, expected_version)
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
        model = self._model(entity_type)
        with session_scope(self._factory) as session:
            result = session.execute(
                delete(model).where(model.id == entity_id, model.version == expected_version)
            )
            if result.rowcount == 0:
                self._raise_missing_or_stale(session, entity_type, entity_id, expected_version)
        logger.debug(
            "record_deleted",
            extra={"entity_type": entity_name(entity_type), "entity_id": str(entity_id)},
        )

    def list(
        self,
        entity_type: type[T],
        predicate: Callable[[T], bool] | None = None,
    ) -> list[T]:
        model = self._model(entity_type)
        with session_scope(self._factory) as session:
            records = [row.to_dto() for row in session.scalars(select(model))]
        if predicate is None:
            return records
        return [r for r in records if predicate(r)]

    def snapshot(self) -> StoreSnapshot:
        with session_scope(self._factory) as session:
            return StoreSnapshot.from_records({
                dto: [row.to_dto() for row in session.scalars(select(model))]
                for dto, model in self._models.items()
            })

    def _raise_missing_or_stale(
        self,
        session: Session,
        entity_type: type,
        entity_id: UUID,
        expected_version: int,
    ) -> None:
        model = self._model(entity_type)
        if session.get(model, entity_id) is None:
            raise EntityNotFoundError(entity_name(entity_type), entity_id)
        raise ConcurrentModificationError(entity_name(entity_type), entity_id, expected_version)
