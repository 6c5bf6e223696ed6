"""
gp_engines.reconciliation -- Cash receipt splits and receipt summaries.

Responsibility:
    Derive the adjusted receipt from the confirmed receipt and its splits,
    validate receipt amounts, check stored receipts against the formula,
    and sum receipts per project or per execution leader.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``adjusted = confirmed - development_split - department_split
      - other_split``.
    - Summaries sum the raw fields and the derived field independently;
      the summed derived value equals the formula applied to the summed
      raw values (linearity).

Failure modes:
    - ValidationError from ``validate_receipt_amounts`` for a negative value.
    - InvariantViolationError from ``assert_receipt_consistent`` when a
      stored receipt disagrees with the formula.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from gp_kernel.exceptions import InvariantViolationError, ValidationError

ZERO = Decimal("0")

RECEIPT_AMOUNT_FIELDS = (
    "finance_receipt",
    "confirmed_receipt",
    "development_split",
    "department_split",
    "other_split",
)


@dataclass(frozen=True)
class CashSummary:
    """Totals over a group of receipts."""

    receipt_count: int = 0
    finance_receipt: Decimal = ZERO
    confirmed_receipt: Decimal = ZERO
    development_split: Decimal = ZERO
    department_split: Decimal = ZERO
    other_split: Decimal = ZERO
    adjusted_receipt: Decimal = ZERO

    def plus(self, receipt: Any) -> "CashSummary":
        return CashSummary(
            receipt_count=self.receipt_count + 1,
            finance_receipt=self.finance_receipt + receipt.finance_receipt,
            confirmed_receipt=self.confirmed_receipt + receipt.confirmed_receipt,
            development_split=self.development_split + receipt.development_split,
            department_split=self.department_split + receipt.department_split,
            other_split=self.other_split + receipt.other_split,
            adjusted_receipt=self.adjusted_receipt + receipt.adjusted_receipt,
        )


def compute_adjusted_receipt(
    confirmed_receipt: Decimal,
    development_split: Decimal,
    department_split: Decimal,
    other_split: Decimal,
) -> Decimal:
    return confirmed_receipt - development_split - department_split - other_split


def validate_receipt_amounts(**amounts: Decimal) -> None:
    """Reject negative or non-finite receipt and split values.

    Raises:
        ValidationError: naming the first offending field.
    """
    for name in RECEIPT_AMOUNT_FIELDS:
        value = amounts.get(name)
        if value is None:
            continue
        if not value.is_finite():
            raise ValidationError(name, f"must be a finite number (got {value})")
        if value < ZERO:
            raise ValidationError(name, f"must not be negative (got {value})")


def assert_receipt_consistent(receipt: Any) -> None:
    expected = compute_adjusted_receipt(
        receipt.confirmed_receipt,
        receipt.development_split,
        receipt.department_split,
        receipt.other_split,
    )
    if receipt.adjusted_receipt != expected:
        raise InvariantViolationError(
            "adjusted_receipt_formula",
            f"receipt {receipt.id}: stored {receipt.adjusted_receipt}, "
            f"formula gives {expected}",
        )


def summarize_receipts(receipts: Iterable[Any]) -> CashSummary:
    summary = CashSummary()
    for receipt in receipts:
        assert_receipt_consistent(receipt)
        summary = summary.plus(receipt)
    return summary


def summarize_by_project(receipts: Iterable[Any]) -> dict[UUID, CashSummary]:
    grouped: dict[UUID, list[Any]] = defaultdict(list)
    for receipt in receipts:
        grouped[receipt.project_id].append(receipt)
    return {pid: summarize_receipts(rs) for pid, rs in grouped.items()}


def summarize_for_executor(
    executor_id: UUID,
    projects: Iterable[Any],
    receipts: Iterable[Any],
) -> CashSummary:
    """Totals over receipts of projects whose execution leader is ``executor_id``."""
    led = {p.id for p in projects if p.execution_leader_id == executor_id}
    return summarize_receipts(r for r in receipts if r.project_id in led)
