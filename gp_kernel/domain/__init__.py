"""
Pure domain layer.

Value objects and predicates with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O (except SystemClock)
"""

from gp_kernel.domain.actor import FEE_EARNING_ROLES, Actor, Capability, Role
from gp_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from gp_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Actor",
    "Capability",
    "Role",
    "FEE_EARNING_ROLES",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "Guard",
    "Transition",
    "Workflow",
]
