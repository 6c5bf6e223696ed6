"""
Tests for cash receipt reconciliation.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from gp_engines.reconciliation import (
    CashSummary,
    assert_receipt_consistent,
    compute_adjusted_receipt,
    summarize_by_project,
    summarize_for_executor,
    summarize_receipts,
    validate_receipt_amounts,
)
from gp_kernel.exceptions import InvariantViolationError, ValidationError
from gp_modules.cash.models import CashReceipt
from gp_modules.project.models import Project


def _receipt(project_id, confirmed, dev="0", dept="0", other="0", adjusted=None):
    confirmed, dev, dept, other = (Decimal(v) for v in (confirmed, dev, dept, other))
    return CashReceipt(
        id=uuid4(),
        project_id=project_id,
        finance_receipt=confirmed,
        confirmed_receipt=confirmed,
        development_split=dev,
        department_split=dept,
        other_split=other,
        adjusted_receipt=(
            Decimal(adjusted) if adjusted is not None
            else compute_adjusted_receipt(confirmed, dev, dept, other)
        ),
    )


def _project(leader):
    return Project(
        id=uuid4(), name="P", short_name="P", client_name="C",
        contract_amount=Decimal("1"), development_leader_id=leader, execution_leader_id=leader,
    )


class TestAdjustedReceipt:

    def test_splits_are_subtracted(self):
        assert compute_adjusted_receipt(
            Decimal("150000"), Decimal("0"), Decimal("20000"), Decimal("5000"),
        ) == Decimal("125000")

    def test_negative_value_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_amounts(confirmed_receipt=Decimal("10"), other_split=Decimal("-1"))
        assert exc_info.value.field == "other_split"

    def test_non_finite_value_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_receipt_amounts(confirmed_receipt=Decimal("NaN"))
        assert exc_info.value.field == "confirmed_receipt"

    def test_inconsistent_stored_receipt_is_invariant_violation(self):
        receipt = _receipt(uuid4(), "1000", dept="100", adjusted="1000")
        with pytest.raises(InvariantViolationError) as exc_info:
            assert_receipt_consistent(receipt)
        assert exc_info.value.invariant == "adjusted_receipt_formula"


class TestSummaries:

    def test_summed_derived_equals_derived_of_sums(self):
        pid = uuid4()
        receipts = [
            _receipt(pid, "150000", dept="20000", other="5000"),
            _receipt(pid, "30000", dev="1000"),
        ]
        summary = summarize_receipts(receipts)
        assert summary.receipt_count == 2
        assert summary.adjusted_receipt == compute_adjusted_receipt(
            summary.confirmed_receipt,
            summary.development_split,
            summary.department_split,
            summary.other_split,
        )
        assert summary.adjusted_receipt == Decimal("154000")

    def test_by_project(self):
        a, b = uuid4(), uuid4()
        grouped = summarize_by_project([_receipt(a, "10"), _receipt(b, "20"), _receipt(a, "5")])
        assert grouped[a].confirmed_receipt == Decimal("15")
        assert grouped[b].receipt_count == 1

    def test_for_executor_only_counts_led_projects(self):
        leader, other = uuid4(), uuid4()
        mine, theirs = _project(leader), _project(other)
        summary = summarize_for_executor(
            leader, [mine, theirs], [_receipt(mine.id, "100"), _receipt(theirs.id, "900")],
        )
        assert summary.confirmed_receipt == Decimal("100")

    def test_empty_summary(self):
        assert summarize_receipts([]) == CashSummary()

    def test_summary_rejects_inconsistent_receipt(self):
        with pytest.raises(InvariantViolationError):
            summarize_receipts([_receipt(uuid4(), "10", dev="1", adjusted="10")])
