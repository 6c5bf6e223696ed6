"""
Actor and capability predicate (``gp_kernel.domain.actor``).

Responsibility
--------------
One value, ``Actor``, carrying the acting user's id and role, and one
method, ``Actor.can_transition(capability, project)``, that answers every
authorization question the state machines ask.  No state machine computes
role booleans of its own.

Architecture position
---------------------
**Kernel domain layer** -- pure.  The project is consumed structurally
(anything exposing ``execution_leader_id``), so the kernel does not import
module DTOs.

Invariants enforced
-------------------
* Role values are the five department roles; anything else is rejected at
  construction (``ValueError``).
* Execution-leader checks compare ids only -- role assignment is the
  identity provider's concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol
from uuid import UUID


class Role(str, Enum):
    """Department roles."""

    EMPLOYEE = "employee"
    INTERN = "intern"
    PROJECT_MANAGER = "project_manager"
    SECRETARY = "secretary"
    DEPARTMENT_HEAD = "department_head"


FEE_EARNING_ROLES: frozenset[Role] = frozenset({Role.EMPLOYEE, Role.INTERN})


class Capability(str, Enum):
    """Things an actor may do to a record, optionally scoped to its project."""

    TIMESHEET_REVIEW = "timesheet_review"
    EXPENSE_EXECUTOR_REVIEW = "expense_executor_review"
    EXPENSE_SECRETARY_REVIEW = "expense_secretary_review"
    EXPENSE_HEAD_REVIEW = "expense_head_review"
    EXPENSE_OVERRIDE = "expense_override"
    PROJECT_SETUP = "project_setup"
    PROJECT_COMPLETION = "project_completion"
    CASH_RECEIPT_WRITE = "cash_receipt_write"
    STAFF_SETUP = "staff_setup"


class ProjectRef(Protocol):
    """What the predicate needs to know about a project."""

    execution_leader_id: UUID


@dataclass(frozen=True)
class Actor:
    """The user issuing a command."""

    user_id: UUID
    role: Role

    def __post_init__(self) -> None:
        # Normalise plain strings ("secretary") to Role
        object.__setattr__(self, "role", Role(self.role))

    @property
    def is_department_head(self) -> bool:
        return self.role is Role.DEPARTMENT_HEAD

    def owns(self, owner_id: UUID) -> bool:
        return self.user_id == owner_id

    def leads(self, project: ProjectRef | None) -> bool:
        """True when this actor is the project's execution leader."""
        return project is not None and project.execution_leader_id == self.user_id

    def can_transition(
        self,
        capability: Capability,
        project: ProjectRef | None = None,
    ) -> bool:
        """Return True iff this actor holds ``capability`` on ``project``."""
        role = self.role
        if capability is Capability.TIMESHEET_REVIEW:
            return self.is_department_head or (
                role is Role.PROJECT_MANAGER and self.leads(project)
            )
        if capability is Capability.EXPENSE_EXECUTOR_REVIEW:
            return self.leads(project)
        if capability is Capability.EXPENSE_SECRETARY_REVIEW:
            return role is Role.SECRETARY
        if capability in (
            Capability.EXPENSE_HEAD_REVIEW,
            Capability.EXPENSE_OVERRIDE,
            Capability.CASH_RECEIPT_WRITE,
            Capability.STAFF_SETUP,
        ):
            return self.is_department_head
        if capability is Capability.PROJECT_SETUP:
            return role in (Role.DEPARTMENT_HEAD, Role.PROJECT_MANAGER)
        if capability is Capability.PROJECT_COMPLETION:
            return self.is_department_head or self.leads(project)
        return False
