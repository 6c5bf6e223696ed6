"""
Shared helpers for module command flows.

Used by gp_modules/*/service.py to reduce duplication when checking a
workflow transition against an actor, converting recoverable kernel errors
into ``CommandResult`` values, and logging each command's outcome.

Architecture: Modules layer. Imports only from gp_kernel.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, TypeVar
from uuid import UUID

from gp_kernel.domain.actor import Actor
from gp_kernel.domain.workflow import Transition, Workflow
from gp_kernel.exceptions import (
    ConcurrentModificationError,
    EntityNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from gp_kernel.logging_config import LogContext, get_logger
from gp_kernel.store.base import EntityStore, entity_name

logger = get_logger("modules.commands")

T = TypeVar("T")


class CommandStatus(str, Enum):
    """Outcome of a module command."""

    APPLIED = "applied"
    INVALID_TRANSITION = "invalid_transition"
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    CONCURRENT_MODIFICATION = "concurrent_modification"


@dataclass(frozen=True)
class CommandResult:
    """Result of a module command."""

    status: CommandStatus
    command: str
    entity: Any = None
    error_code: str | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == CommandStatus.APPLIED

    @classmethod
    def applied(cls, command: str, entity: Any = None) -> "CommandResult":
        return cls(status=CommandStatus.APPLIED, command=command, entity=entity)

    @classmethod
    def failed(cls, command: str, exc: Exception) -> "CommandResult":
        return cls(
            status=_STATUS_BY_ERROR[type(exc)],
            command=command,
            error_code=exc.code,
            message=str(exc),
        )


_STATUS_BY_ERROR: dict[type, CommandStatus] = {
    InvalidTransitionError: CommandStatus.INVALID_TRANSITION,
    ValidationError: CommandStatus.VALIDATION_FAILED,
    EntityNotFoundError: CommandStatus.NOT_FOUND,
    ConcurrentModificationError: CommandStatus.CONCURRENT_MODIFICATION,
}

RECOVERABLE_ERRORS = tuple(_STATUS_BY_ERROR)


def run_command(
    command: str,
    actor_id: UUID | None,
    body: Callable[[], T],
    *,
    entity_id: UUID | None = None,
    project_id: UUID | None = None,
) -> CommandResult:
    """Run ``body`` and convert recoverable kernel errors into a result.

    ``InvariantViolationError`` and anything unexpected propagate.
    """
    with LogContext.bind(actor_id=actor_id, entity_id=entity_id, project_id=project_id):
        logger.info("command_started", extra={"command": command})
        try:
            entity = body()
        except RECOVERABLE_ERRORS as exc:
            logger.info(
                "command_rejected",
                extra={"command": command, "error_code": exc.code, "reason": str(exc)},
            )
            return CommandResult.failed(command, exc)
        logger.info("command_applied", extra={"command": command})
        return CommandResult.applied(command, entity)


def require_transition(
    workflow: Workflow,
    entity_type: str,
    entity_id: UUID,
    current_state: str,
    action: str,
    actor: Actor,
    project: Any = None,
) -> Transition:
    """Return the transition for ``action`` if ``actor`` may fire it.

    Raises:
        InvalidTransitionError: no such transition from ``current_state``,
            or the actor lacks the transition's capability.
    """
    transition = workflow.transition_for(current_state, action)
    if transition is None:
        raise InvalidTransitionError(
            entity_type, entity_id, action, current_state,
            f"no '{action}' transition from '{current_state}'",
        )
    if transition.capability is not None and not actor.can_transition(
        transition.capability, project,
    ):
        raise InvalidTransitionError(
            entity_type, entity_id, action, current_state,
            f"{actor.role.value} lacks {transition.capability.value}",
        )
    return transition


def parse_amount(field: str, value: Any, *, positive: bool = False) -> Decimal:
    """Coerce ``value`` to Decimal, rejecting non-numbers and negatives.

    Raises:
        ValidationError: naming ``field``.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(field, f"expected a number, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(field, f"expected a number, got {value!r}") from exc
    if not amount.is_finite():
        raise ValidationError(field, f"expected a finite number, got {value!r}")
    if positive and amount <= 0:
        raise ValidationError(field, f"must be positive (got {amount})")
    if amount < 0:
        raise ValidationError(field, f"must not be negative (got {amount})")
    return amount


def require_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "must be a non-empty string")
    return value.strip()


def require_date(field: str, value: Any) -> date:
    """Accept a calendar date; ``datetime`` is a ``date`` subclass and is refused."""
    if not isinstance(value, date) or isinstance(value, datetime):
        raise ValidationError(field, f"expected a date, got {value!r}")
    return value


def require_reference(store: EntityStore, entity_type: type[T], field: str, entity_id: Any) -> T:
    """Return the record a command argument points at.

    A dangling reference is bad input, not a missing command target.

    Raises:
        ValidationError: naming ``field``.
    """
    record = store.find(entity_type, entity_id) if isinstance(entity_id, UUID) else None
    if record is None:
        raise ValidationError(field, f"{entity_id} is not a known {entity_name(entity_type)}")
    return record


def require_unused_id(store: EntityStore, entity_type: type, field: str, entity_id: UUID | None) -> None:
    """Refuse a caller-supplied id that is already stored."""
    if entity_id is not None and store.find(entity_type, entity_id) is not None:
        raise ValidationError(field, f"{entity_name(entity_type)} {entity_id} already exists")
