"""
Module: gp_kernel.db.base
Responsibility: Declarative base classes for the SQLAlchemy ORM models that
    back ``SqlEntityStore``.  Provides the UUID primary key convention, the
    type annotation map for consistent column types, and the VersionedBase
    mixin that carries the compare-and-set ``version`` column.
Architecture position: Kernel > DB.  Lowest-level import target for every
    module ``orm.py``.  MUST NOT import from gp_modules or gp_services.

Invariants enforced:
    - UUID primary keys stored as String(36) for portability (SQLite and
      PostgreSQL alike).
    - Decimal maps to Numeric(38, 9).  NEVER use float for money or hours.
    - ``version`` starts at 1 and is only written by the store's
      compare-and-set UPDATE.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Integer, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID type stored as String(36) for cross-database portability."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is a uuid4-generated UUID stored as String(36).
        - Decimal maps to Numeric(38, 9).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class VersionedBase(Base):
    """
    Abstract base for records written through compare-and-set.

    Subclasses implement ``to_dto()`` and ``from_dto(dto)``; the store uses
    ``column_values(dto)`` to build its UPDATE statement.
    """

    __abstract__ = True

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    @classmethod
    def column_values(cls, dto) -> dict:
        """Column name -> value for every non-key column of ``dto``."""
        row = cls.from_dto(dto)
        return {
            col.key: getattr(row, col.key)
            for col in cls.__table__.columns
            if col.key not in ("id", "version")
        }


# Re-export UUID for convenience
UUID = PyUUID
