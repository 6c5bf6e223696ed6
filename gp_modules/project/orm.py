"""
SQLAlchemy ORM persistence model for the Project module.

Invariants enforced
-------------------
* ``status`` is stored as its integer value (0..4).  Reading a row with any
  other value raises ``InvariantViolationError`` via ``ProjectStatus.coerce``.
* ``contract_amount`` uses Numeric(38, 9) -- NEVER float.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from gp_kernel.db.base import VersionedBase


class ProjectModel(VersionedBase):
    """A client engagement."""

    __tablename__ = "projects"

    __table_args__ = (
        Index("idx_project_status", "status"),
        Index("idx_project_execution_leader", "execution_leader_id"),
    )

    name: Mapped[str] = mapped_column(String(300), nullable=False)
    short_name: Mapped[str] = mapped_column(String(100), nullable=False)
    client_name: Mapped[str] = mapped_column(String(300), nullable=False)
    contract_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    development_leader_id: Mapped[UUID]
    execution_leader_id: Mapped[UUID]
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completion_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime | None]

    def to_dto(self):
        from gp_modules.project.models import Project, ProjectStatus

        return Project(
            id=self.id,
            name=self.name,
            short_name=self.short_name,
            client_name=self.client_name,
            contract_amount=self.contract_amount,
            development_leader_id=self.development_leader_id,
            execution_leader_id=self.execution_leader_id,
            status=ProjectStatus.coerce(self.status),
            completion_date=self.completion_date,
            created_at=self.created_at,
            version=self.version,
        )

    @classmethod
    def from_dto(cls, dto) -> "ProjectModel":
        return cls(
            id=dto.id,
            name=dto.name,
            short_name=dto.short_name,
            client_name=dto.client_name,
            contract_amount=dto.contract_amount,
            development_leader_id=dto.development_leader_id,
            execution_leader_id=dto.execution_leader_id,
            status=int(dto.status),
            completion_date=dto.completion_date,
            created_at=dto.created_at,
            version=dto.version,
        )

    def __repr__(self) -> str:
        return f"<ProjectModel {self.short_name} [{self.status}] {self.contract_amount}>"
