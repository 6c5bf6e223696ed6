"""
Project Lifecycle Triggers (``gp_modules.project.lifecycle``).

Responsibility
--------------
Advance a project's status in response to a ``LifecycleTrigger``.  Each
trigger is a compare-and-set against its exact predecessor status: when
the project is anywhere else the trigger is a logged no-op.

Invariants enforced
-------------------
* Status only moves forward, one step at a time.
* A stored status outside 0..4 raises ``InvariantViolationError``.
* On a version conflict the project is re-read and the trigger
  re-evaluated, at most ``MAX_ATTEMPTS`` times, so racing or duplicate
  triggers collapse to one transition.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from uuid import UUID

from gp_kernel.exceptions import ConcurrentModificationError, InvariantViolationError
from gp_kernel.logging_config import get_logger
from gp_kernel.store.base import EntityStore
from gp_modules.project.models import Project, ProjectStatus
from gp_modules.project.workflows import LifecycleTrigger, transition_for_trigger

logger = get_logger("modules.project.lifecycle")

MAX_ATTEMPTS = 3


class TriggerOutcome(str, Enum):
    ADVANCED = "advanced"
    SKIPPED = "skipped"
    CONFLICTED = "conflicted"


class ProjectLifecycle:
    """Fires lifecycle triggers against the entity store."""

    def __init__(self, store: EntityStore):
        self._store = store

    def fire(self, trigger: LifecycleTrigger, project_id: UUID) -> TriggerOutcome:
        transition = transition_for_trigger(trigger)
        source = ProjectStatus.from_label(transition.from_state)
        target = ProjectStatus.from_label(transition.to_state)
        if target != source + 1:
            raise InvariantViolationError(
                "project_status_monotonic",
                f"{trigger.value} would move {source.label} to {target.label}",
            )

        for attempt in range(1, MAX_ATTEMPTS + 1):
            project = self._store.get(Project, project_id)
            current = ProjectStatus.coerce(project.status)

            if current != source:
                logger.info(
                    "project_lifecycle_trigger_skipped",
                    extra={
                        "trigger": trigger.value,
                        "project_id": str(project_id),
                        "current_status": current.label,
                        "required_status": source.label,
                    },
                )
                return TriggerOutcome.SKIPPED

            try:
                self._store.replace(
                    dataclasses.replace(project, status=target),
                    expected_version=project.version,
                )
            except ConcurrentModificationError:
                logger.warning(
                    "project_lifecycle_trigger_conflict",
                    extra={
                        "trigger": trigger.value,
                        "project_id": str(project_id),
                        "attempt": attempt,
                        "max_attempts": MAX_ATTEMPTS,
                    },
                )
                continue

            logger.info(
                "project_lifecycle_advanced",
                extra={
                    "trigger": trigger.value,
                    "project_id": str(project_id),
                    "from_status": source.label,
                    "to_status": target.label,
                },
            )
            return TriggerOutcome.ADVANCED

        logger.warning(
            "project_lifecycle_trigger_abandoned",
            extra={"trigger": trigger.value, "project_id": str(project_id)},
        )
        return TriggerOutcome.CONFLICTED
