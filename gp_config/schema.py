"""
Configuration Schema (``gp_config.schema``).

Responsibility
--------------
Frozen dataclass describing the department's tunable figures: working
hours per day, the employee bonus rate, salary ratios for bonus pools,
the healthy-margin threshold and the allowed expense categories.

Architecture position
---------------------
**Config layer** -- pure data definitions.  No dependency on kernel,
modules or engines; no I/O.

Invariants enforced
-------------------
* ``DepartmentConfig`` is frozen.
* Decimal values only; float never appears in a parsed config.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from uuid import UUID

DEFAULT_EXPENSE_CATEGORIES: tuple[str, ...] = (
    "lodging",
    "meals",
    "taxi",
    "rail",
    "flight",
    "other",
)


@dataclass(frozen=True)
class DepartmentConfig:
    """Runtime configuration for one department."""

    config_id: str = "default"
    version: int = 1
    hours_per_day: Decimal = Decimal("8")
    employee_bonus_rate: Decimal = Decimal("0.10")
    default_salary_ratio: Decimal | None = None
    salary_ratios: Mapping[UUID, Decimal] = field(
        default_factory=lambda: MappingProxyType({})
    )
    healthy_margin_threshold: Decimal = Decimal("30")
    expense_categories: tuple[str, ...] = DEFAULT_EXPENSE_CATEGORIES
    checksum: str = ""

    def salary_ratio_for(self, project_id: UUID) -> Decimal | None:
        """Configured ratio for a project, falling back to the default."""
        return self.salary_ratios.get(project_id, self.default_salary_ratio)
