"""
SQLAlchemy ORM persistence model for the Expense module.

Responsibility
--------------
Persist expense claims.  The ordered approval history is stored inline as
a JSON list on the claim row; it is only ever read and written with the
claim.

Invariants enforced
-------------------
* ``amount`` uses Numeric(38, 9) -- NEVER float.
* ``status`` and ``category`` stored as String(50).
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gp_kernel.db.base import VersionedBase


def _step_to_json(step) -> dict:
    return {
        "actor_id": str(step.actor_id),
        "action": step.action,
        "from_state": step.from_state,
        "to_state": step.to_state,
        "at": step.at.isoformat(),
        "comment": step.comment,
    }


def _step_from_json(data: dict):
    from gp_modules.expense.models import ApprovalStep

    return ApprovalStep(
        actor_id=UUID(data["actor_id"]),
        action=data["action"],
        from_state=data["from_state"],
        to_state=data["to_state"],
        at=datetime.fromisoformat(data["at"]),
        comment=data.get("comment"),
    )


class ExpenseEntryModel(VersionedBase):
    """
    A travel expense claim.

    Maps to the ``ExpenseEntry`` DTO in ``gp_modules.expense.models``.
    """

    __tablename__ = "expense_entries"

    __table_args__ = (
        Index("idx_expense_user", "user_id"),
        Index("idx_expense_project", "project_id"),
        Index("idx_expense_status", "status"),
    )

    user_id: Mapped[UUID]
    project_id: Mapped[UUID]
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal]
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    receipt_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    approvals: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    submitted_at: Mapped[datetime | None]

    def to_dto(self):
        from gp_modules.expense.models import ExpenseEntry, ExpenseStatus

        return ExpenseEntry(
            id=self.id,
            user_id=self.user_id,
            project_id=self.project_id,
            expense_date=self.expense_date,
            category=self.category,
            amount=self.amount,
            description=self.description,
            receipt_url=self.receipt_url,
            status=ExpenseStatus(self.status),
            approvals=tuple(_step_from_json(s) for s in self.approvals or ()),
            submitted_at=self.submitted_at,
            version=self.version,
        )

    @classmethod
    def from_dto(cls, dto) -> "ExpenseEntryModel":
        return cls(
            id=dto.id,
            user_id=dto.user_id,
            project_id=dto.project_id,
            expense_date=dto.expense_date,
            category=dto.category,
            amount=dto.amount,
            description=dto.description,
            receipt_url=dto.receipt_url,
            status=dto.status.value,
            approvals=[_step_to_json(s) for s in dto.approvals],
            submitted_at=dto.submitted_at,
            version=dto.version,
        )

    def __repr__(self) -> str:
        return f"<ExpenseEntryModel {self.id} [{self.status}] {self.amount}>"
