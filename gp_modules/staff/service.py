"""
Staff Module Service (``gp_modules.staff.service``).

Responsibility
--------------
Registers department members.  The first user may be registered with no
actor (bootstrap); after that only an actor holding ``STAFF_SETUP`` may
register users.

Failure modes
-------------
* ``InvalidTransitionError`` -- actor lacks ``STAFF_SETUP``.
* ``ValidationError`` -- empty name, negative rates, unknown role.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from gp_kernel.domain.actor import Actor, Capability, Role
from gp_kernel.exceptions import InvalidTransitionError, ValidationError
from gp_kernel.logging_config import get_logger
from gp_kernel.store.base import EntityStore
from gp_modules._command_helpers import (
    CommandResult,
    parse_amount,
    require_text,
    require_unused_id,
    run_command,
)
from gp_modules.staff.models import User

logger = get_logger("modules.staff.service")


class StaffService:
    """Registers users in the entity store."""

    def __init__(self, store: EntityStore):
        self._store = store

    def register_user(
        self,
        actor: Actor | None,
        name: str,
        role: Role | str,
        daily_rate: Decimal | int | str = Decimal("0"),
        daily_wage: Decimal | int | str = Decimal("0"),
        level: str = "junior",
        user_id: UUID | None = None,
    ) -> CommandResult:
        return run_command(
            "register_user",
            actor.user_id if actor else None,
            lambda: self._register(actor, name, role, daily_rate, daily_wage, level, user_id),
            entity_id=user_id,
        )

    def _register(
        self,
        actor: Actor | None,
        name: str,
        role: Any,
        daily_rate: Any,
        daily_wage: Any,
        level: str,
        user_id: UUID | None,
    ) -> User:
        bootstrap = not self._store.list(User)
        if not bootstrap and (actor is None or not actor.can_transition(Capability.STAFF_SETUP)):
            raise InvalidTransitionError(
                "User", user_id or "new", "register", "-",
                "only the department head may register users",
            )

        try:
            parsed_role = Role(role)
        except ValueError as exc:
            raise ValidationError("role", f"unknown role {role!r}") from exc

        if not isinstance(level, str) or not level.strip():
            raise ValidationError("level", "must be a non-empty string")
        require_unused_id(self._store, User, "user_id", user_id)

        user = User(
            id=user_id or uuid4(),
            name=require_text("name", name),
            role=parsed_role,
            daily_rate=parse_amount("daily_rate", daily_rate),
            daily_wage=parse_amount("daily_wage", daily_wage),
            level=level.strip(),
        )
        stored = self._store.add(user)
        logger.info(
            "user_registered",
            extra={
                "user_id": str(stored.id),
                "role": stored.role.value,
                "bootstrap": bootstrap,
            },
        )
        return stored
