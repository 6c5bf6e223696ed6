"""
Department modules.

Each module follows the same layout:

    models.py     frozen DTOs and status enums
    workflows.py  Workflow definitions (where the module has a state machine)
    orm.py        SQLAlchemy models with to_dto() / from_dto()
    service.py    commands returning CommandResult

Modules import from gp_kernel and gp_engines only (and, for the lifecycle
triggers, from gp_modules.project).
"""
