"""
Typed exception hierarchy for the operations kernel.

Every error a caller may need to react to has its own class, a
machine-readable ``code`` class attribute, and structured attributes
(never parse the message).

    GpKernelError (base)
    |
    +-- InvalidTransitionError      INVALID_TRANSITION
    +-- ValidationError             VALIDATION_FAILED
    +-- EntityNotFoundError         ENTITY_NOT_FOUND
    +-- ConcurrencyError
    |   +-- ConcurrentModificationError   CONCURRENT_MODIFICATION
    +-- InvariantViolationError     INVARIANT_VIOLATION

The first four are recoverable: module services convert them into
``CommandResult`` values.  ``InvariantViolationError`` is a programming
error (a stored record contradicts its own formula, or a status is out of
range) and always propagates.

Handling pattern::

    try:
        machine.approve(actor, entry_id)
    except InvalidTransitionError as e:
        return {"error": e.code, "state": e.current_state, "action": e.action}
    except ConcurrentModificationError:
        # refetch and retry, or surface a conflict
        ...
"""

from __future__ import annotations

from typing import Any


class GpKernelError(Exception):
    """
    Base exception for all operations kernel errors.

    All subclasses carry a ``code`` class attribute.
    """

    code: str = "GP_KERNEL_ERROR"


class InvalidTransitionError(GpKernelError):
    """Wrong current state, or actor not empowered for the transition."""

    code: str = "INVALID_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        action: str,
        current_state: str,
        reason: str,
    ):
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        self.action = action
        self.current_state = current_state
        self.reason = reason
        super().__init__(
            f"Cannot {action} {entity_type} {entity_id} in state "
            f"'{current_state}': {reason}"
        )


class ValidationError(GpKernelError):
    """Command input rejected before any mutation."""

    code: str = "VALIDATION_FAILED"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class EntityNotFoundError(GpKernelError):
    """Unknown entity id."""

    code: str = "ENTITY_NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        super().__init__(f"{entity_type} {entity_id} not found")


class ConcurrencyError(GpKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class ConcurrentModificationError(ConcurrencyError):
    """Compare-and-set precondition failed: the record changed since it was read."""

    code: str = "CONCURRENT_MODIFICATION"

    def __init__(self, entity_type: str, entity_id: Any, expected_version: int):
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        self.expected_version = expected_version
        super().__init__(
            f"Concurrent modification on {entity_type} {entity_id}: "
            f"expected version {expected_version} is stale"
        )


class InvariantViolationError(GpKernelError):
    """A stored record contradicts a documented invariant. Never recovered."""

    code: str = "INVARIANT_VIOLATION"

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.detail = detail
        super().__init__(f"Invariant '{invariant}' violated: {detail}")
