"""
Staff Domain Models.

Department members with their role and day rates.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from gp_kernel.domain.actor import Role

KNOWN_LEVELS: tuple[str, ...] = ("junior", "mid", "senior", "expert")


@dataclass(frozen=True)
class User:
    """A department member.

    ``daily_rate`` is the cost rate used for labor cost; ``daily_wage`` is
    the pay rate.  ``role`` never changes after registration.
    """
    id: UUID
    name: str
    role: Role
    daily_rate: Decimal = Decimal("0")
    daily_wage: Decimal = Decimal("0")
    level: str = "junior"
    version: int = 0
