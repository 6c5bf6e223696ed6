"""
gp_services.role_authority -- Resolve users to actors at the command boundary.

Responsibility:
    Answer "what role does this user hold" and "does this user lead that
    project" from the registered users and projects, and build the
    ``Actor`` value the state machines consume.

Architecture position:
    Services layer.  The facade calls ``actor_for`` once per command; the
    modules never look users up themselves.

Invariants:
    - Roles come only from the stored ``User`` record; callers cannot
      claim a role.
    - Execution leadership is an id comparison on the stored project.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from gp_kernel.domain.actor import Actor, Role
from gp_kernel.store.base import EntityStore
from gp_modules.project.models import Project
from gp_modules.staff.models import User


class RoleAuthority(Protocol):
    """Collaborator contract for role lookups."""

    def role_of(self, user_id: UUID) -> Role: ...

    def is_execution_leader_of(self, user_id: UUID, project_id: UUID) -> bool: ...

    def is_department_head(self, user_id: UUID) -> bool: ...

    def actor_for(self, user_id: UUID) -> Actor: ...


class StoreRoleAuthority:
    """``RoleAuthority`` backed by the entity store.

    Raises ``EntityNotFoundError`` for unknown users or projects.
    """

    def __init__(self, store: EntityStore):
        self._store = store

    def role_of(self, user_id: UUID) -> Role:
        return self._store.get(User, user_id).role

    def is_execution_leader_of(self, user_id: UUID, project_id: UUID) -> bool:
        return self._store.get(Project, project_id).execution_leader_id == user_id

    def is_department_head(self, user_id: UUID) -> bool:
        return self.role_of(user_id) is Role.DEPARTMENT_HEAD

    def actor_for(self, user_id: UUID) -> Actor:
        return Actor(user_id=user_id, role=self.role_of(user_id))
