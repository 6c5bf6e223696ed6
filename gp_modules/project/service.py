"""
Project Module Service (``gp_modules.project.service``).

Responsibility
--------------
Project setup and completion: ``create_project`` and ``update_project``
(``PROJECT_SETUP``), ``set_completion_date`` (``PROJECT_COMPLETION``).
Setting a completion date fires the ``completion_date_set`` lifecycle
trigger after the write.

Invariants enforced
-------------------
* Status is never writable through this service; it moves only through
  ``ProjectLifecycle``.
* Leaders must be registered users.
* Every write is a compare-and-set on the version read by the command.

Failure modes
-------------
* ``InvalidTransitionError`` -- actor lacks the capability.
* ``ValidationError`` -- bad amounts, empty names, unknown fields or leaders.
* ``EntityNotFoundError`` -- unknown project id.
* ``ConcurrentModificationError`` -- project changed since it was read.
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from gp_kernel.domain.actor import Actor, Capability
from gp_kernel.domain.clock import Clock, SystemClock
from gp_kernel.exceptions import InvalidTransitionError, ValidationError
from gp_kernel.logging_config import get_logger
from gp_kernel.store.base import EntityStore
from gp_modules._command_helpers import (
    CommandResult,
    parse_amount,
    require_date,
    require_reference,
    require_text,
    require_unused_id,
    run_command,
)
from gp_modules.project.lifecycle import ProjectLifecycle
from gp_modules.project.models import Project, ProjectStatus
from gp_modules.project.workflows import LifecycleTrigger
from gp_modules.staff.models import User

logger = get_logger("modules.project.service")

UPDATABLE_FIELDS = frozenset({
    "name",
    "short_name",
    "client_name",
    "contract_amount",
    "development_leader_id",
    "execution_leader_id",
})


class ProjectService:
    """
    Project setup commands.

    Contract
    --------
    Every public method returns ``CommandResult``; callers inspect
    ``result.is_success``.
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
    # Setup
    # =========================================================================

    def create_project(
        self,
        actor: Actor,
        name: str,
        short_name: str,
        client_name: str,
        contract_amount: Decimal | int | str,
        development_leader_id: UUID,
        execution_leader_id: UUID,
        project_id: UUID | None = None,
    ) -> CommandResult:
        def body() -> Project:
            self._require(actor, Capability.PROJECT_SETUP, None, "create", project_id or "new")
            require_unused_id(self._store, Project, "project_id", project_id)
            project = Project(
                id=project_id or uuid4(),
                name=require_text("name", name),
                short_name=require_text("short_name", short_name),
                client_name=require_text("client_name", client_name),
                contract_amount=parse_amount("contract_amount", contract_amount),
                development_leader_id=self._require_user("development_leader_id", development_leader_id),
                execution_leader_id=self._require_user("execution_leader_id", execution_leader_id),
                status=ProjectStatus.NOT_STARTED,
                created_at=self._clock.now(),
            )
            stored = self._store.add(project)
            logger.info(
                "project_created",
                extra={
                    "project_id": str(stored.id),
                    "short_name": stored.short_name,
                    "contract_amount": str(stored.contract_amount),
                },
            )
            return stored

        return run_command("create_project", actor.user_id, body, entity_id=project_id)

    def update_project(
        self,
        actor: Actor,
        project_id: UUID,
        **fields: Any,
    ) -> CommandResult:
        def body() -> Project:
            project = self._store.get(Project, project_id)
            self._require(actor, Capability.PROJECT_SETUP, project, "update", project_id)

            unknown = set(fields) - UPDATABLE_FIELDS
            if unknown:
                raise ValidationError(
                    ", ".join(sorted(unknown)), "not an updatable project field",
                )
            changes: dict[str, Any] = {}
            for key, value in fields.items():
                if key == "contract_amount":
                    changes[key] = parse_amount(key, value)
                elif key.endswith("_leader_id"):
                    changes[key] = self._require_user(key, value)
                else:
                    changes[key] = require_text(key, value)

            stored = self._store.replace(
                dataclasses.replace(project, **changes),
                expected_version=project.version,
            )
            logger.info(
                "project_updated",
                extra={"project_id": str(project_id), "fields": sorted(changes)},
            )
            return stored

        return run_command(
            "update_project", actor.user_id, body,
            entity_id=project_id, project_id=project_id,
        )

    # =========================================================================
    # Completion
    # =========================================================================

    def set_completion_date(
        self,
        actor: Actor,
        project_id: UUID,
        completion_date: date,
    ) -> CommandResult:
        """Record the completion date, then fire ``completion_date_set``.

        The date may be re-set; the trigger only advances a project that is
        in progress.
        """
        def body() -> Project:
            require_date("completion_date", completion_date)
            project = self._store.get(Project, project_id)
            self._require(actor, Capability.PROJECT_COMPLETION, project, "set_completion_date", project_id)
            self._store.replace(
                dataclasses.replace(project, completion_date=completion_date),
                expected_version=project.version,
            )
            self._lifecycle.fire(LifecycleTrigger.COMPLETION_DATE_SET, project_id)
            return self._store.get(Project, project_id)

        return run_command(
            "set_project_completion_date", actor.user_id, body,
            entity_id=project_id, project_id=project_id,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require(
        self,
        actor: Actor,
        capability: Capability,
        project: Project | None,
        action: str,
        entity_id: Any,
    ) -> None:
        if not actor.can_transition(capability, project):
            state = ProjectStatus.coerce(project.status).label if project is not None else "-"
            raise InvalidTransitionError(
                "Project", entity_id, action, state,
                f"{actor.role.value} lacks {capability.value}",
            )

    def _require_user(self, field: str, user_id: Any) -> UUID:
        return require_reference(self._store, User, field, user_id).id
