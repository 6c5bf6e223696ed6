"""
Project Domain Models.

Client engagements and their five-step lifecycle status.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import IntEnum
from typing import Any
from uuid import UUID

from gp_kernel.exceptions import InvariantViolationError


class ProjectStatus(IntEnum):
    """Project lifecycle status; only ever moves forward one step."""
    NOT_STARTED = 0
    IN_PROGRESS = 1
    COMPLETED = 2
    INVOICED = 3
    RECEIVED = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "ProjectStatus":
        return cls[label.upper()]

    @classmethod
    def coerce(cls, value: Any) -> "ProjectStatus":
        """Return the status for a stored value; anything else is corrupt data."""
        if isinstance(value, bool):
            raise InvariantViolationError("project_status_range", f"status {value!r}")
        try:
            return cls(value)
        except ValueError as exc:
            raise InvariantViolationError(
                "project_status_range",
                f"status {value!r} is not one of 0..4",
            ) from exc


@dataclass(frozen=True)
class Project:
    """A client engagement.

    ``contract_amount`` is the revenue basis for gross profit.
    """
    id: UUID
    name: str
    short_name: str
    client_name: str
    contract_amount: Decimal
    development_leader_id: UUID
    execution_leader_id: UUID
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    completion_date: date | None = None
    created_at: datetime | None = None
    version: int = 0
