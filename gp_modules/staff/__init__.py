"""
Staff Module (``gp_modules.staff``).

Department members, their roles and day rates.
"""

from gp_modules.staff.models import KNOWN_LEVELS, User
from gp_modules.staff.service import StaffService

__all__ = [
    "User",
    "KNOWN_LEVELS",
    "StaffService",
]
