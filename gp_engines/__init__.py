"""
Pure calculation engines.

Zero I/O, no clock access.  Inputs are plain records; outputs are frozen
dataclasses or Decimals.
"""

from gp_engines.financials import (
    DepartmentProfitSummary,
    EmployeeBonusRow,
    MarginBand,
    ProjectContribution,
    ProjectFinancials,
    TimesheetSummary,
    TimesheetSummaryRow,
    bonus_pool,
    compute_project_financials,
    department_profit_summary,
    employee_bonus_table,
    margin_band,
    timesheet_summary,
)
from gp_engines.reconciliation import (
    CashSummary,
    assert_receipt_consistent,
    compute_adjusted_receipt,
    summarize_by_project,
    summarize_for_executor,
    summarize_receipts,
    validate_receipt_amounts,
)

__all__ = [
    "ProjectFinancials",
    "MarginBand",
    "TimesheetSummary",
    "TimesheetSummaryRow",
    "DepartmentProfitSummary",
    "EmployeeBonusRow",
    "ProjectContribution",
    "compute_project_financials",
    "bonus_pool",
    "margin_band",
    "timesheet_summary",
    "department_profit_summary",
    "employee_bonus_table",
    "CashSummary",
    "compute_adjusted_receipt",
    "validate_receipt_amounts",
    "assert_receipt_consistent",
    "summarize_receipts",
    "summarize_by_project",
    "summarize_for_executor",
]
