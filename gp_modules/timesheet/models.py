"""
Timesheet Domain Models.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class TimesheetStatus(str, Enum):
    """Timesheet approval states."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class TimesheetEntry:
    """Hours a user worked on a project over a date range."""
    id: UUID
    user_id: UUID
    project_id: UUID
    start_date: date
    end_date: date
    total_hours: Decimal
    description: str = ""
    status: TimesheetStatus = TimesheetStatus.PENDING
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    review_comment: str | None = None
    submitted_at: datetime | None = None
    version: int = 0
