"""
Cash Receipt Domain Models.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class CashReceipt:
    """Money received against a project and how it is split.

    ``adjusted_receipt`` is derived:
    ``confirmed_receipt - development_split - department_split - other_split``.
    """
    id: UUID
    project_id: UUID
    finance_receipt: Decimal = Decimal("0")
    confirmed_receipt: Decimal = Decimal("0")
    development_split: Decimal = Decimal("0")
    department_split: Decimal = Decimal("0")
    other_split: Decimal = Decimal("0")
    adjusted_receipt: Decimal = Decimal("0")
    invoice_date: date | None = None
    receipt_date: date | None = None
    remark: str = ""
    version: int = 0
