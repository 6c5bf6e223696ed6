"""
SQLAlchemy ORM persistence model for the Cash module.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` (Numeric(38,9)) -- NEVER float.
* ``adjusted_receipt`` is persisted as written by the service; readers
  check it against the formula.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from gp_kernel.db.base import VersionedBase


class CashReceiptModel(VersionedBase):
    """
    A cash receipt against a project.

    Maps to the ``CashReceipt`` DTO in ``gp_modules.cash.models``.
    """

    __tablename__ = "cash_receipts"

    __table_args__ = (
        Index("idx_cash_receipt_project", "project_id"),
    )

    project_id: Mapped[UUID]
    finance_receipt: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    confirmed_receipt: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    development_split: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    department_split: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    other_split: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    adjusted_receipt: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    invoice_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    receipt_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    remark: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def to_dto(self):
        from gp_modules.cash.models import CashReceipt

        return CashReceipt(
            id=self.id,
            project_id=self.project_id,
            finance_receipt=self.finance_receipt,
            confirmed_receipt=self.confirmed_receipt,
            development_split=self.development_split,
            department_split=self.department_split,
            other_split=self.other_split,
            adjusted_receipt=self.adjusted_receipt,
            invoice_date=self.invoice_date,
            receipt_date=self.receipt_date,
            remark=self.remark,
            version=self.version,
        )

    @classmethod
    def from_dto(cls, dto) -> "CashReceiptModel":
        return cls(
            id=dto.id,
            project_id=dto.project_id,
            finance_receipt=dto.finance_receipt,
            confirmed_receipt=dto.confirmed_receipt,
            development_split=dto.development_split,
            department_split=dto.department_split,
            other_split=dto.other_split,
            adjusted_receipt=dto.adjusted_receipt,
            invoice_date=dto.invoice_date,
            receipt_date=dto.receipt_date,
            remark=dto.remark,
            version=dto.version,
        )

    def __repr__(self) -> str:
        return f"<CashReceiptModel {self.id} confirmed={self.confirmed_receipt}>"
