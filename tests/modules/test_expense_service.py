"""
The four-stage expense approval chain, head overrides and edit windows.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from gp_kernel.domain.actor import Actor, Role
from gp_modules._command_helpers import CommandStatus
from gp_modules.expense.models import ExpenseEntry, ExpenseStatus
from gp_modules.expense.service import ExpenseService


@pytest.fixture
def service(store, clock):
    return ExpenseService(store, clock=clock)


@pytest.fixture
def actors(staff):
    return {
        "head": Actor(staff.head, Role.DEPARTMENT_HEAD),
        "pm": Actor(staff.pm, Role.PROJECT_MANAGER),
        "other_pm": Actor(staff.other_pm, Role.PROJECT_MANAGER),
        "secretary": Actor(staff.secretary, Role.SECRETARY),
        "employee": Actor(staff.employee, Role.EMPLOYEE),
    }


@pytest.fixture
def claim(service, actors, project):
    result = service.submit(actors["employee"], project.id, date(2024, 3, 5), "lodging", "500")
    assert result.is_success, result.message
    return result.entity


class TestChain:

    def test_full_chain_records_every_step(self, service, actors, claim):
        pm, secretary, head = actors["pm"], actors["secretary"], actors["head"]

        assert service.advance(pm, claim.id).entity.status is ExpenseStatus.EXECUTOR_APPROVED
        assert service.advance(secretary, claim.id).entity.status is ExpenseStatus.SECRETARY_APPROVED
        final = service.advance(head, claim.id, "fine").entity

        assert final.status is ExpenseStatus.APPROVED
        assert [(s.actor_id, s.from_state, s.to_state) for s in final.approvals] == [
            (pm.user_id, "pending", "executor_approved"),
            (secretary.user_id, "executor_approved", "secretary_approved"),
            (head.user_id, "secretary_approved", "approved"),
        ]
        assert final.approvals[-1].comment == "fine"

    def test_secretary_cannot_skip_executor_stage(self, service, store, actors, claim):
        result = service.advance(actors["secretary"], claim.id)
        assert result.status is CommandStatus.INVALID_TRANSITION
        assert store.get(ExpenseEntry, claim.id).status is ExpenseStatus.PENDING

    def test_non_leading_manager_cannot_advance(self, service, actors, claim):
        assert service.advance(actors["other_pm"], claim.id).status is CommandStatus.INVALID_TRANSITION

    def test_approved_is_terminal(self, service, actors, claim):
        service.force_approve(actors["head"], claim.id)
        assert service.advance(actors["head"], claim.id).status is CommandStatus.INVALID_TRANSITION
        assert service.reject(actors["head"], claim.id).status is CommandStatus.INVALID_TRANSITION


class TestHeadOverride:

    def test_force_approve_from_pending(self, service, actors, claim):
        result = service.force_approve(actors["head"], claim.id)
        assert result.entity.status is ExpenseStatus.APPROVED
        assert result.entity.approvals[0].action == "force_approve"

    def test_head_advance_on_earlier_stage_force_approves(self, service, actors, claim, captured_logs):
        result = service.advance(actors["head"], claim.id)

        assert result.entity.status is ExpenseStatus.APPROVED
        assert result.entity.approvals[0].action == "force_approve"
        assert any(r["message"] == "expense_head_override" for r in captured_logs())

    def test_only_head_may_force_approve(self, service, actors, claim):
        assert service.force_approve(actors["pm"], claim.id).status is CommandStatus.INVALID_TRANSITION

    def test_head_rejects_at_any_stage(self, service, actors, claim):
        service.advance(actors["pm"], claim.id)
        result = service.reject(actors["head"], claim.id, "no receipt")
        assert result.entity.status is ExpenseStatus.REJECTED
        assert result.entity.approvals[-1].from_state == "executor_approved"

    def test_stage_reviewer_rejects(self, service, actors, claim):
        service.advance(actors["pm"], claim.id)
        assert service.reject(actors["secretary"], claim.id).entity.status is ExpenseStatus.REJECTED


class TestSubmitValidation:

    def test_unknown_category(self, service, actors, project):
        result = service.submit(actors["employee"], project.id, date(2024, 3, 5), "spa", "10")
        assert result.status is CommandStatus.VALIDATION_FAILED

    def test_configured_categories(self, store, clock, actors, project):
        custom = ExpenseService(store, clock, categories=("mileage",))
        assert custom.submit(actors["employee"], project.id, date(2024, 3, 5), "mileage", "10").is_success
        assert custom.submit(actors["employee"], project.id, date(2024, 3, 5), "lodging", "10").status \
            is CommandStatus.VALIDATION_FAILED

    @pytest.mark.parametrize("amount", ["0", "-5", "x"])
    def test_amount_must_be_positive(self, service, actors, project, amount):
        result = service.submit(actors["employee"], project.id, date(2024, 3, 5), "lodging", amount)
        assert result.status is CommandStatus.VALIDATION_FAILED

    def test_datetime_is_not_an_expense_date(self, service, store, actors, project):
        result = service.submit(actors["employee"], project.id, datetime(2024, 3, 5, 12), "lodging", "10")
        assert result.status is CommandStatus.VALIDATION_FAILED
        assert store.list(ExpenseEntry) == []

    def test_unknown_project_is_bad_input(self, service, store, actors):
        result = service.submit(actors["employee"], uuid4(), date(2024, 3, 5), "lodging", "10")
        assert result.status is CommandStatus.VALIDATION_FAILED
        assert "project_id" in result.message
        assert store.list(ExpenseEntry) == []

    def test_reused_entry_id_is_rejected(self, service, store, actors, project, claim):
        again = service.submit(
            actors["employee"], project.id, date(2024, 3, 6), "flight", "900", entry_id=claim.id,
        )

        assert again.status is CommandStatus.VALIDATION_FAILED
        assert "entry_id" in again.message
        stored = store.get(ExpenseEntry, claim.id)
        assert stored.amount == Decimal("500")
        assert stored.version == 1


class TestEditWindows:

    def test_owner_edits_while_pending(self, service, actors, claim):
        result = service.edit(actors["employee"], claim.id, amount="450")
        assert result.entity.amount == Decimal("450")
        assert result.entity.status is ExpenseStatus.PENDING

    def test_owner_locked_out_once_review_started(self, service, actors, claim):
        service.advance(actors["pm"], claim.id)
        assert service.edit(actors["employee"], claim.id, amount="1").status is CommandStatus.INVALID_TRANSITION
        assert service.delete(actors["employee"], claim.id).status is CommandStatus.INVALID_TRANSITION

    def test_head_edits_approved_claim_without_changing_status(self, service, actors, claim):
        service.force_approve(actors["head"], claim.id)
        result = service.edit(actors["head"], claim.id, amount="480")
        assert result.entity.status is ExpenseStatus.APPROVED
        assert result.entity.amount == Decimal("480")

    def test_nobody_edits_intermediate_or_rejected(self, service, actors, claim):
        service.advance(actors["pm"], claim.id)
        assert service.edit(actors["head"], claim.id, amount="1").status is CommandStatus.INVALID_TRANSITION
        service.reject(actors["head"], claim.id)
        assert service.delete(actors["head"], claim.id).status is CommandStatus.INVALID_TRANSITION

    def test_head_deletes_approved_claim(self, service, store, actors, claim):
        service.force_approve(actors["head"], claim.id)
        assert service.delete(actors["head"], claim.id).is_success
        assert store.find(ExpenseEntry, claim.id) is None
