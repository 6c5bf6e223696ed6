"""
Travel Expense Module Service (``gp_modules.expense.service``).

Responsibility
--------------
Submission, staged approval (advance / force_approve / reject), edit and
delete of travel expense claims.  Every review action appends an
``ApprovalStep`` to the claim.

Architecture position
---------------------
**Modules layer** -- ``ExpenseService`` is the sole entry point for expense
claim commands.  Authorization questions go to ``Actor.can_transition``
via ``EXPENSE_APPROVAL_WORKFLOW``.

Invariants enforced
-------------------
* ``advance`` moves exactly one stage and needs the current stage's
  capability.  A department head without that capability force-approves.
* ``reject`` is open to the current stage's reviewer and to the
  department head; ``rejected`` is terminal.
* Edit / delete: owner only while ``pending``; department head while
  ``pending`` or ``approved``; nobody in the intermediate stages or after
  rejection.  Edits never change the status.
* ``amount > 0``; category from the configured list.

Failure modes
-------------
* ``InvalidTransitionError`` -- wrong state or actor not empowered.
* ``ValidationError`` -- bad amount, category, date or fields, an unknown
  project or a reused entry id.
* ``EntityNotFoundError`` -- unknown claim.
* ``ConcurrentModificationError`` -- claim changed since it was read.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from gp_kernel.domain.actor import Actor, Capability
from gp_kernel.domain.clock import Clock, SystemClock
from gp_kernel.domain.workflow import Transition
from gp_kernel.exceptions import InvalidTransitionError, ValidationError
from gp_kernel.logging_config import get_logger
from gp_kernel.store.base import EntityStore
from gp_modules._command_helpers import (
    CommandResult,
    parse_amount,
    require_date,
    require_reference,
    require_transition,
    require_unused_id,
    run_command,
)
from gp_modules.expense.models import (
    ApprovalStep,
    ExpenseCategory,
    ExpenseEntry,
    ExpenseStatus,
)
from gp_modules.expense.workflows import EXPENSE_APPROVAL_WORKFLOW
from gp_modules.project.models import Project

logger = get_logger("modules.expense.service")

EDITABLE_FIELDS = frozenset({
    "project_id",
    "expense_date",
    "category",
    "amount",
    "description",
    "receipt_url",
})

_OWNER_EDITABLE = frozenset({ExpenseStatus.PENDING})
_HEAD_EDITABLE = frozenset({ExpenseStatus.PENDING, ExpenseStatus.APPROVED})


class ExpenseService:
    """
    Expense claim commands.

    Contract
    --------
    Every public method returns ``CommandResult``; the ``_``-prefixed
    counterparts raise the typed kernel errors.
    """

    def __init__(
        self,
        store: EntityStore,
        clock: Clock | None = None,
        categories: Sequence[str] | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._categories = tuple(categories or (c.value for c in ExpenseCategory))

    # =========================================================================
    # Submission
    # =========================================================================

    def submit(
        self,
        actor: Actor,
        project_id: UUID,
        expense_date: date,
        category: str,
        amount: Decimal | int | str,
        description: str = "",
        receipt_url: str | None = None,
        entry_id: UUID | None = None,
    ) -> CommandResult:
        def body() -> ExpenseEntry:
            entry = ExpenseEntry(
                id=entry_id or uuid4(),
                user_id=actor.user_id,
                project_id=project_id,
                expense_date=_check_date(expense_date),
                category=self._check_category(category),
                amount=parse_amount("amount", amount, positive=True),
                description=description or "",
                receipt_url=receipt_url,
                status=ExpenseStatus.PENDING,
                submitted_at=self._clock.now(),
            )
            require_reference(self._store, Project, "project_id", project_id)
            require_unused_id(self._store, ExpenseEntry, "entry_id", entry_id)
            stored = self._store.add(entry)
            logger.info(
                "expense_submitted",
                extra={
                    "entry_id": str(stored.id),
                    "project_id": str(project_id),
                    "category": stored.category,
                    "amount": str(stored.amount),
                },
            )
            return stored

        return run_command(
            "submit_expense", actor.user_id, body,
            entity_id=entry_id, project_id=project_id,
        )

    # =========================================================================
    # Review
    # =========================================================================

    def advance(self, actor: Actor, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return run_command(
            "advance_expense", actor.user_id,
            lambda: self._review(actor, entry_id, "advance", comment),
            entity_id=entry_id,
        )

    def force_approve(self, actor: Actor, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return run_command(
            "force_approve_expense", actor.user_id,
            lambda: self._review(actor, entry_id, "force_approve", comment),
            entity_id=entry_id,
        )

    def reject(self, actor: Actor, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return run_command(
            "reject_expense", actor.user_id,
            lambda: self._review(actor, entry_id, "reject", comment),
            entity_id=entry_id,
        )

    def _review(
        self,
        actor: Actor,
        entry_id: UUID,
        action: str,
        comment: str | None,
    ) -> ExpenseEntry:
        entry = self._store.get(ExpenseEntry, entry_id)
        project = self._store.find(Project, entry.project_id)
        transition = self._authorize(entry, action, actor, project)

        step = ApprovalStep(
            actor_id=actor.user_id,
            action=transition.action,
            from_state=transition.from_state,
            to_state=transition.to_state,
            at=self._clock.now(),
            comment=comment,
        )
        stored = self._store.replace(
            dataclasses.replace(
                entry,
                status=ExpenseStatus(transition.to_state),
                approvals=entry.approvals + (step,),
            ),
            expected_version=entry.version,
        )
        logger.info(
            "expense_reviewed",
            extra={
                "entry_id": str(entry_id),
                "action": transition.action,
                "from_state": transition.from_state,
                "to_state": transition.to_state,
            },
        )
        return stored

    def _authorize(
        self,
        entry: ExpenseEntry,
        action: str,
        actor: Actor,
        project: Project | None,
    ) -> Transition:
        state = entry.status.value
        try:
            return require_transition(
                EXPENSE_APPROVAL_WORKFLOW, "ExpenseEntry", entry.id,
                state, action, actor, project,
            )
        except InvalidTransitionError:
            override = actor.can_transition(Capability.EXPENSE_OVERRIDE)
            if not override:
                raise
            if action == "advance":
                fallback = EXPENSE_APPROVAL_WORKFLOW.transition_for(state, "force_approve")
            elif action == "reject":
                fallback = EXPENSE_APPROVAL_WORKFLOW.transition_for(state, "reject")
            else:
                fallback = None
            if fallback is None:
                raise
            logger.info(
                "expense_head_override",
                extra={"entry_id": str(entry.id), "requested": action, "applied": fallback.action},
            )
            return fallback

    # =========================================================================
    # Edit / delete
    # =========================================================================

    def edit(self, actor: Actor, entry_id: UUID, **fields: Any) -> CommandResult:
        def body() -> ExpenseEntry:
            entry = self._store.get(ExpenseEntry, entry_id)
            self._require_editable(actor, entry, "edit")

            unknown = set(fields) - EDITABLE_FIELDS
            if unknown:
                raise ValidationError(", ".join(sorted(unknown)), "not an editable expense field")

            changes = dict(fields)
            if "amount" in changes:
                changes["amount"] = parse_amount("amount", changes["amount"], positive=True)
            if "category" in changes:
                changes["category"] = self._check_category(changes["category"])
            if "expense_date" in changes:
                changes["expense_date"] = _check_date(changes["expense_date"])
            if "project_id" in changes:
                require_reference(self._store, Project, "project_id", changes["project_id"])
            if "description" in changes:
                changes["description"] = changes["description"] or ""

            stored = self._store.replace(
                dataclasses.replace(entry, **changes),
                expected_version=entry.version,
            )
            logger.info(
                "expense_edited",
                extra={
                    "entry_id": str(entry_id),
                    "status": entry.status.value,
                    "fields": sorted(changes),
                },
            )
            return stored

        return run_command("edit_expense", actor.user_id, body, entity_id=entry_id)

    def delete(self, actor: Actor, entry_id: UUID) -> CommandResult:
        def body() -> None:
            entry = self._store.get(ExpenseEntry, entry_id)
            self._require_editable(actor, entry, "delete")
            self._store.delete(ExpenseEntry, entry_id, expected_version=entry.version)
            logger.info("expense_deleted", extra={"entry_id": str(entry_id)})

        return run_command("delete_expense", actor.user_id, body, entity_id=entry_id)

    @staticmethod
    def _require_editable(actor: Actor, entry: ExpenseEntry, action: str) -> None:
        if actor.is_department_head and entry.status in _HEAD_EDITABLE:
            return
        if actor.owns(entry.user_id) and entry.status in _OWNER_EDITABLE:
            return
        raise InvalidTransitionError(
            "ExpenseEntry", entry.id, action, entry.status.value,
            f"{actor.role.value} may not {action} a claim in this state",
        )

    def _check_category(self, category: Any) -> str:
        value = category.value if isinstance(category, ExpenseCategory) else category
        if value not in self._categories:
            raise ValidationError(
                "category", f"{category!r} is not one of {', '.join(self._categories)}",
            )
        return value


def _check_date(value: Any) -> date:
    return require_date("expense_date", value)
