"""
The capability predicate: who may do what on which project.
"""

from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest

from gp_kernel.domain.actor import Actor, Capability, Role


@dataclass(frozen=True)
class _Project:
    execution_leader_id: UUID


LEADER = uuid4()
PROJECT = _Project(execution_leader_id=LEADER)


def _actor(role: Role, user_id: UUID | None = None) -> Actor:
    return Actor(user_id=user_id or uuid4(), role=role)


class TestTimesheetReview:

    def test_department_head_reviews_any_project(self):
        assert _actor(Role.DEPARTMENT_HEAD).can_transition(Capability.TIMESHEET_REVIEW, PROJECT)

    def test_project_manager_must_lead_the_project(self):
        assert _actor(Role.PROJECT_MANAGER, LEADER).can_transition(Capability.TIMESHEET_REVIEW, PROJECT)
        assert not _actor(Role.PROJECT_MANAGER).can_transition(Capability.TIMESHEET_REVIEW, PROJECT)

    def test_employee_leading_a_project_still_cannot_review_timesheets(self):
        assert not _actor(Role.EMPLOYEE, LEADER).can_transition(Capability.TIMESHEET_REVIEW, PROJECT)


class TestExpenseStages:

    def test_executor_review_is_for_the_execution_leader_of_any_role(self):
        assert _actor(Role.EMPLOYEE, LEADER).can_transition(Capability.EXPENSE_EXECUTOR_REVIEW, PROJECT)
        assert not _actor(Role.DEPARTMENT_HEAD).can_transition(Capability.EXPENSE_EXECUTOR_REVIEW, PROJECT)

    def test_secretary_review(self):
        assert _actor(Role.SECRETARY).can_transition(Capability.EXPENSE_SECRETARY_REVIEW, PROJECT)
        assert not _actor(Role.PROJECT_MANAGER, LEADER).can_transition(
            Capability.EXPENSE_SECRETARY_REVIEW, PROJECT,
        )

    @pytest.mark.parametrize("capability", [
        Capability.EXPENSE_HEAD_REVIEW,
        Capability.EXPENSE_OVERRIDE,
        Capability.CASH_RECEIPT_WRITE,
        Capability.STAFF_SETUP,
    ])
    def test_head_only_capabilities(self, capability):
        assert _actor(Role.DEPARTMENT_HEAD).can_transition(capability, PROJECT)
        for role in (Role.EMPLOYEE, Role.INTERN, Role.PROJECT_MANAGER, Role.SECRETARY):
            assert not _actor(role, LEADER).can_transition(capability, PROJECT)


class TestProjectCapabilities:

    def test_setup_is_head_or_any_project_manager(self):
        assert _actor(Role.DEPARTMENT_HEAD).can_transition(Capability.PROJECT_SETUP)
        assert _actor(Role.PROJECT_MANAGER).can_transition(Capability.PROJECT_SETUP)
        assert not _actor(Role.SECRETARY).can_transition(Capability.PROJECT_SETUP)

    def test_completion_is_head_or_execution_leader(self):
        assert _actor(Role.DEPARTMENT_HEAD).can_transition(Capability.PROJECT_COMPLETION, PROJECT)
        assert _actor(Role.PROJECT_MANAGER, LEADER).can_transition(Capability.PROJECT_COMPLETION, PROJECT)
        assert not _actor(Role.PROJECT_MANAGER).can_transition(Capability.PROJECT_COMPLETION, PROJECT)

    def test_leadership_needs_a_project(self):
        assert not _actor(Role.PROJECT_MANAGER, LEADER).can_transition(Capability.PROJECT_COMPLETION, None)


class TestActorValue:

    def test_role_strings_are_normalised(self):
        actor = Actor(user_id=uuid4(), role="secretary")
        assert actor.role is Role.SECRETARY

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            Actor(user_id=uuid4(), role="auditor")
