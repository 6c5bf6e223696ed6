"""
Timesheet Module Service (``gp_modules.timesheet.service``).

Responsibility
--------------
Submission, review (approve / reject), edit and delete of timesheet
entries.  A submission fires the ``timesheet_created`` lifecycle trigger
on its project after the entry is stored.

Invariants enforced
-------------------
* ``approve`` / ``reject`` only from ``pending`` and only for actors with
  ``TIMESHEET_REVIEW`` on the entry's project.  Both outcomes are terminal.
* Edit and delete: the owner or the department head, at any status.
* ``total_hours > 0`` and ``start_date <= end_date``.
* Every write is a compare-and-set on the version read by the command.

Failure modes
-------------
* ``InvalidTransitionError`` -- wrong state or missing capability.
* ``ValidationError`` -- bad hours, dates or fields, an unknown project or
  a reused entry id.
* ``EntityNotFoundError`` -- unknown entry.
* ``ConcurrentModificationError`` -- entry changed since it was read.

Usage::

    service = TimesheetService(store, clock=clock)
    result = service.submit(actor, project_id, date(2024, 3, 4),
                            date(2024, 3, 8), Decimal("40"))
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from gp_kernel.domain.actor import Actor
from gp_kernel.domain.clock import Clock, SystemClock
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
from gp_modules.project.lifecycle import ProjectLifecycle
from gp_modules.project.models import Project
from gp_modules.project.workflows import LifecycleTrigger
from gp_modules.timesheet.models import TimesheetEntry, TimesheetStatus
from gp_modules.timesheet.workflows import TIMESHEET_APPROVAL_WORKFLOW

logger = get_logger("modules.timesheet.service")

EDITABLE_FIELDS = frozenset({
    "project_id",
    "start_date",
    "end_date",
    "total_hours",
    "description",
})


class TimesheetService:
    """
    Timesheet commands.

    Contract
    --------
    Every public method returns ``CommandResult``; the ``_``-prefixed
    counterparts raise the typed kernel errors.
    """

    def __init__(
        self,
        store: EntityStore,
        lifecycle: ProjectLifecycle | None = None,
        clock: Clock | None = None,
    ):
        self._store = store
        self._lifecycle = lifecycle or ProjectLifecycle(store)
        self._clock = clock or SystemClock()

    # =========================================================================
    # Submission
    # =========================================================================

    def submit(
        self,
        actor: Actor,
        project_id: UUID,
        start_date: date,
        end_date: date,
        total_hours: Decimal | int | str,
        description: str = "",
        entry_id: UUID | None = None,
    ) -> CommandResult:
        return run_command(
            "submit_timesheet", actor.user_id,
            lambda: self._submit(
                actor, project_id, start_date, end_date, total_hours, description, entry_id,
            ),
            entity_id=entry_id, project_id=project_id,
        )

    def _submit(
        self,
        actor: Actor,
        project_id: UUID,
        start_date: date,
        end_date: date,
        total_hours: Any,
        description: str,
        entry_id: UUID | None,
    ) -> TimesheetEntry:
        hours = parse_amount("total_hours", total_hours, positive=True)
        _check_dates(start_date, end_date)
        require_reference(self._store, Project, "project_id", project_id)
        require_unused_id(self._store, TimesheetEntry, "entry_id", entry_id)

        entry = TimesheetEntry(
            id=entry_id or uuid4(),
            user_id=actor.user_id,
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
            total_hours=hours,
            description=description or "",
            status=TimesheetStatus.PENDING,
            submitted_at=self._clock.now(),
        )
        stored = self._store.add(entry)
        logger.info(
            "timesheet_submitted",
            extra={
                "entry_id": str(stored.id),
                "project_id": str(project_id),
                "total_hours": str(hours),
            },
        )
        self._lifecycle.fire(LifecycleTrigger.TIMESHEET_CREATED, project_id)
        return stored

    # =========================================================================
    # Review
    # =========================================================================

    def approve(self, actor: Actor, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return run_command(
            "approve_timesheet", actor.user_id,
            lambda: self._review(actor, entry_id, "approve", comment),
            entity_id=entry_id,
        )

    def reject(self, actor: Actor, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return run_command(
            "reject_timesheet", actor.user_id,
            lambda: self._review(actor, entry_id, "reject", comment),
            entity_id=entry_id,
        )

    def _review(
        self,
        actor: Actor,
        entry_id: UUID,
        action: str,
        comment: str | None,
    ) -> TimesheetEntry:
        entry = self._store.get(TimesheetEntry, entry_id)
        project = self._store.find(Project, entry.project_id)
        transition = require_transition(
            TIMESHEET_APPROVAL_WORKFLOW, "TimesheetEntry", entry_id,
            entry.status.value, action, actor, project,
        )
        stored = self._store.replace(
            dataclasses.replace(
                entry,
                status=TimesheetStatus(transition.to_state),
                reviewed_by=actor.user_id,
                reviewed_at=self._clock.now(),
                review_comment=comment,
            ),
            expected_version=entry.version,
        )
        logger.info(
            "timesheet_reviewed",
            extra={
                "entry_id": str(entry_id),
                "from_state": transition.from_state,
                "to_state": transition.to_state,
            },
        )
        return stored

    # =========================================================================
    # Edit / delete
    # =========================================================================

    def edit(self, actor: Actor, entry_id: UUID, **fields: Any) -> CommandResult:
        return run_command(
            "edit_timesheet", actor.user_id,
            lambda: self._edit(actor, entry_id, fields),
            entity_id=entry_id,
        )

    def _edit(self, actor: Actor, entry_id: UUID, fields: dict[str, Any]) -> TimesheetEntry:
        entry = self._store.get(TimesheetEntry, entry_id)
        self._require_owner_or_head(actor, entry, "edit")

        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(", ".join(sorted(unknown)), "not an editable timesheet field")

        changes = dict(fields)
        if "total_hours" in changes:
            changes["total_hours"] = parse_amount("total_hours", changes["total_hours"], positive=True)
        if "project_id" in changes:
            require_reference(self._store, Project, "project_id", changes["project_id"])
        if "description" in changes:
            changes["description"] = changes["description"] or ""

        updated = dataclasses.replace(entry, **changes)
        _check_dates(updated.start_date, updated.end_date)
        stored = self._store.replace(updated, expected_version=entry.version)
        logger.info(
            "timesheet_edited",
            extra={"entry_id": str(entry_id), "fields": sorted(changes)},
        )
        return stored

    def delete(self, actor: Actor, entry_id: UUID) -> CommandResult:
        def body() -> None:
            entry = self._store.get(TimesheetEntry, entry_id)
            self._require_owner_or_head(actor, entry, "delete")
            self._store.delete(TimesheetEntry, entry_id, expected_version=entry.version)
            logger.info("timesheet_deleted", extra={"entry_id": str(entry_id)})

        return run_command("delete_timesheet", actor.user_id, body, entity_id=entry_id)

    @staticmethod
    def _require_owner_or_head(actor: Actor, entry: TimesheetEntry, action: str) -> None:
        if not (actor.owns(entry.user_id) or actor.is_department_head):
            raise InvalidTransitionError(
                "TimesheetEntry", entry.id, action, entry.status.value,
                "only the owner or the department head may change an entry",
            )


def _check_dates(start_date: Any, end_date: Any) -> None:
    require_date("start_date", start_date)
    require_date("end_date", end_date)
    if start_date > end_date:
        raise ValidationError("end_date", f"{end_date} is before {start_date}")
