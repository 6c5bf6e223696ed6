"""
Module ORM Registry (``gp_modules._orm_registry``).

Responsibility
--------------
Ensure all module-level SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before tables are
created, and map each module DTO type to its ORM model for
``SqlEntityStore``.

Architecture position
---------------------
**Modules layer** -- utility.  MUST NOT be imported by ``gp_kernel`` at
module load; ``gp_kernel.db.engine.create_tables`` imports it lazily.
"""

from __future__ import annotations


def import_all_orm_models() -> None:
    """Import every ``gp_modules.*.orm`` module (idempotent)."""
    # fmt: off
    import gp_modules.cash.orm  # noqa: F401
    import gp_modules.expense.orm  # noqa: F401
    import gp_modules.project.orm  # noqa: F401
    import gp_modules.staff.orm  # noqa: F401
    import gp_modules.timesheet.orm  # noqa: F401
    # fmt: on


def dto_model_map() -> dict[type, type]:
    """DTO class -> ORM model class for every persisted record type."""
    from gp_modules.cash.models import CashReceipt
    from gp_modules.cash.orm import CashReceiptModel
    from gp_modules.expense.models import ExpenseEntry
    from gp_modules.expense.orm import ExpenseEntryModel
    from gp_modules.project.models import Project
    from gp_modules.project.orm import ProjectModel
    from gp_modules.staff.models import User
    from gp_modules.staff.orm import UserModel
    from gp_modules.timesheet.models import TimesheetEntry
    from gp_modules.timesheet.orm import TimesheetEntryModel

    return {
        User: UserModel,
        Project: ProjectModel,
        TimesheetEntry: TimesheetEntryModel,
        ExpenseEntry: ExpenseEntryModel,
        CashReceipt: CashReceiptModel,
    }
