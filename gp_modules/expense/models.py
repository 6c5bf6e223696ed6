"""
Travel Expense Domain Models.

The nouns of expense claims: the claim itself, its category, and the
ordered record of approval steps it went through.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class ExpenseCategory(str, Enum):
    """Travel expense categories."""
    LODGING = "lodging"
    MEALS = "meals"
    TAXI = "taxi"
    RAIL = "rail"
    FLIGHT = "flight"
    OTHER = "other"


class ExpenseStatus(str, Enum):
    """Four-stage approval chain plus the terminal rejection."""
    PENDING = "pending"
    EXECUTOR_APPROVED = "executor_approved"
    SECRETARY_APPROVED = "secretary_approved"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ApprovalStep:
    """One review action taken on a claim."""
    actor_id: UUID
    action: str
    from_state: str
    to_state: str
    at: datetime
    comment: str | None = None


@dataclass(frozen=True)
class ExpenseEntry:
    """A travel expense claim against a project."""
    id: UUID
    user_id: UUID
    project_id: UUID
    expense_date: date
    category: str
    amount: Decimal
    description: str = ""
    receipt_url: str | None = None
    status: ExpenseStatus = ExpenseStatus.PENDING
    approvals: tuple[ApprovalStep, ...] = ()
    submitted_at: datetime | None = None
    version: int = 0
