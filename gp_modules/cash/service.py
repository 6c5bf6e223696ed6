"""
Cash Receipt Module Service (``gp_modules.cash.service``).

Responsibility
--------------
Record, update and delete cash receipts.  Every write recomputes
``adjusted_receipt`` through ``gp_engines.reconciliation``; callers can
never set it.  After a write, lifecycle triggers fire in order:

* ``invoice_recorded`` when the receipt gains an invoice date;
* ``receipt_confirmed`` when ``confirmed_receipt`` becomes positive.

Invariants enforced
-------------------
* Only actors with ``CASH_RECEIPT_WRITE`` (the department head) may write.
* Receipt and split values are non-negative.
* A stored receipt whose derived field disagrees with the formula raises
  ``InvariantViolationError`` before it is touched.

Failure modes
-------------
* ``InvalidTransitionError`` -- actor not empowered.
* ``ValidationError`` -- negative values, unknown fields, bad dates, an
  unknown project or a reused receipt id.
* ``EntityNotFoundError`` -- unknown receipt.
* ``ConcurrentModificationError`` -- receipt changed since it was read.
"""

from __future__ import annotations

import dataclasses
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from gp_engines.reconciliation import (
    RECEIPT_AMOUNT_FIELDS,
    assert_receipt_consistent,
    compute_adjusted_receipt,
    validate_receipt_amounts,
)
from gp_kernel.domain.actor import Actor, Capability
from gp_kernel.exceptions import InvalidTransitionError, ValidationError
from gp_kernel.logging_config import get_logger
from gp_kernel.store.base import EntityStore
from gp_modules._command_helpers import (
    CommandResult,
    parse_amount,
    require_date,
    require_reference,
    require_unused_id,
    run_command,
)
from gp_modules.cash.models import CashReceipt
from gp_modules.project.lifecycle import ProjectLifecycle
from gp_modules.project.models import Project
from gp_modules.project.workflows import LifecycleTrigger

logger = get_logger("modules.cash.service")

ZERO = Decimal("0")

EDITABLE_FIELDS = frozenset(RECEIPT_AMOUNT_FIELDS) | {
    "invoice_date",
    "receipt_date",
    "remark",
}


class CashService:
    """Cash receipt commands; each returns ``CommandResult``."""

    def __init__(self, store: EntityStore, lifecycle: ProjectLifecycle | None = None):
        self._store = store
        self._lifecycle = lifecycle or ProjectLifecycle(store)

    def record(
        self,
        actor: Actor,
        project_id: UUID,
        receipt_id: UUID | None = None,
        **fields: Any,
    ) -> CommandResult:
        def body() -> CashReceipt:
            project = require_reference(self._store, Project, "project_id", project_id)
            self._require_writer(actor, receipt_id or "new", "record", project)
            require_unused_id(self._store, CashReceipt, "receipt_id", receipt_id)
            values = _clean_fields(fields)
            receipt = _with_adjusted(CashReceipt(
                id=receipt_id or uuid4(),
                project_id=project_id,
                **values,
            ))
            stored = self._store.add(receipt)
            logger.info(
                "cash_receipt_recorded",
                extra={
                    "receipt_id": str(stored.id),
                    "confirmed_receipt": str(stored.confirmed_receipt),
                    "adjusted_receipt": str(stored.adjusted_receipt),
                },
            )
            self._fire_triggers(None, stored)
            return stored

        return run_command(
            "record_cash_receipt", actor.user_id, body,
            entity_id=receipt_id, project_id=project_id,
        )

    def update(self, actor: Actor, receipt_id: UUID, **fields: Any) -> CommandResult:
        def body() -> CashReceipt:
            current = self._store.get(CashReceipt, receipt_id)
            assert_receipt_consistent(current)
            project = self._store.find(Project, current.project_id)
            self._require_writer(actor, receipt_id, "update", project)
            values = _clean_fields(fields)
            stored = self._store.replace(
                _with_adjusted(dataclasses.replace(current, **values)),
                expected_version=current.version,
            )
            logger.info(
                "cash_receipt_updated",
                extra={
                    "receipt_id": str(receipt_id),
                    "fields": sorted(values),
                    "adjusted_receipt": str(stored.adjusted_receipt),
                },
            )
            self._fire_triggers(current, stored)
            return stored

        return run_command("update_cash_receipt", actor.user_id, body, entity_id=receipt_id)

    def delete(self, actor: Actor, receipt_id: UUID) -> CommandResult:
        def body() -> None:
            current = self._store.get(CashReceipt, receipt_id)
            project = self._store.find(Project, current.project_id)
            self._require_writer(actor, receipt_id, "delete", project)
            self._store.delete(CashReceipt, receipt_id, expected_version=current.version)
            logger.info("cash_receipt_deleted", extra={"receipt_id": str(receipt_id)})

        return run_command("delete_cash_receipt", actor.user_id, body, entity_id=receipt_id)

    def _fire_triggers(self, before: CashReceipt | None, after: CashReceipt) -> None:
        gained_invoice = after.invoice_date is not None and (
            before is None or before.invoice_date is None
        )
        became_confirmed = after.confirmed_receipt > ZERO and (
            before is None or before.confirmed_receipt <= ZERO
        )
        if gained_invoice:
            self._lifecycle.fire(LifecycleTrigger.INVOICE_RECORDED, after.project_id)
        if became_confirmed:
            self._lifecycle.fire(LifecycleTrigger.RECEIPT_CONFIRMED, after.project_id)

    @staticmethod
    def _require_writer(actor: Actor, receipt_id: Any, action: str, project: Project | None) -> None:
        if not actor.can_transition(Capability.CASH_RECEIPT_WRITE, project):
            raise InvalidTransitionError(
                "CashReceipt", receipt_id, action, "-",
                f"{actor.role.value} lacks {Capability.CASH_RECEIPT_WRITE.value}",
            )


def _clean_fields(fields: dict[str, Any]) -> dict[str, Any]:
    if "adjusted_receipt" in fields:
        raise ValidationError("adjusted_receipt", "derived field; it cannot be set")
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(", ".join(sorted(unknown)), "not a cash receipt field")

    values: dict[str, Any] = {}
    for key, value in fields.items():
        if key in RECEIPT_AMOUNT_FIELDS:
            values[key] = parse_amount(key, value)
        elif key in ("invoice_date", "receipt_date"):
            values[key] = None if value is None else require_date(key, value)
        else:
            values[key] = value or ""
    return values


def _with_adjusted(receipt: CashReceipt) -> CashReceipt:
    validate_receipt_amounts(**{name: getattr(receipt, name) for name in RECEIPT_AMOUNT_FIELDS})
    return dataclasses.replace(
        receipt,
        adjusted_receipt=compute_adjusted_receipt(
            receipt.confirmed_receipt,
            receipt.development_split,
            receipt.department_split,
            receipt.other_split,
        ),
    )
