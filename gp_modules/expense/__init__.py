"""
Travel Expense Module (``gp_modules.expense``).

Responsibility
--------------
Travel expense claims and their four-stage approval chain (execution
leader, secretary, department head).  Approved claims count as project
travel expense.

Failure modes
-------------
* ``CommandResult.is_success == False`` -- invalid transition, validation
  failure, unknown entity or a concurrent modification.
"""

from gp_modules.expense.models import (
    ApprovalStep,
    ExpenseCategory,
    ExpenseEntry,
    ExpenseStatus,
)
from gp_modules.expense.service import ExpenseService
from gp_modules.expense.workflows import EXPENSE_APPROVAL_WORKFLOW, STAGE_CAPABILITIES

__all__ = [
    "ApprovalStep",
    "ExpenseCategory",
    "ExpenseEntry",
    "ExpenseStatus",
    "ExpenseService",
    "EXPENSE_APPROVAL_WORKFLOW",
    "STAGE_CAPABILITIES",
]
