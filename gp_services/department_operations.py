"""
gp_services.department_operations -- Command / query facade for the department.

Responsibility:
    Creates every module service exactly once over one entity store and
    exposes the department's commands and queries.  Commands take the
    acting user's id, resolve it to an ``Actor`` through the
    ``RoleAuthority`` and return a ``CommandResult``.  Queries read a store
    snapshot and delegate the arithmetic to ``gp_engines``.

Architecture position:
    Services -- the top of the stack.  The only place where module
    services are constructed and composed.

Invariants enforced:
    - Each command runs under its own correlation id in ``LogContext``.
    - An unknown acting user yields a ``NOT_FOUND`` result; nothing is
      written.
    - Queries never cache; every call recomputes from a fresh snapshot.

Usage:
    from gp_services import DepartmentOperations

    ops = DepartmentOperations()
    head = ops.register_user(None, "Avery", "department_head").entity
    ...
    fin = ops.get_project_financials(project_id)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID, uuid4

from gp_config import get_active_config
from gp_config.schema import DepartmentConfig
from gp_engines.financials import (
    DepartmentProfitSummary,
    EmployeeBonusRow,
    ProjectFinancials,
    TimesheetSummary,
    bonus_pool,
    compute_project_financials,
    department_profit_summary,
    employee_bonus_table,
    timesheet_summary,
)
from gp_engines.reconciliation import (
    CashSummary,
    summarize_by_project,
    summarize_for_executor,
)
from gp_kernel.domain.actor import Actor, Role
from gp_kernel.domain.clock import Clock, SystemClock
from gp_kernel.exceptions import EntityNotFoundError, ValidationError
from gp_kernel.logging_config import LogContext, get_logger
from gp_kernel.store.base import EntityStore, StoreSnapshot
from gp_kernel.store.memory import InMemoryEntityStore
from gp_modules._command_helpers import CommandResult
from gp_modules.cash.models import CashReceipt
from gp_modules.cash.service import CashService
from gp_modules.expense.models import ExpenseEntry
from gp_modules.expense.service import ExpenseService
from gp_modules.project.lifecycle import ProjectLifecycle
from gp_modules.project.models import Project
from gp_modules.project.service import ProjectService
from gp_modules.staff.models import User
from gp_modules.staff.service import StaffService
from gp_modules.timesheet.models import TimesheetEntry
from gp_modules.timesheet.service import TimesheetService
from gp_services.role_authority import RoleAuthority, StoreRoleAuthority

logger = get_logger("services.department_operations")


class DepartmentOperations:
    """
    The department's command and query surface.

    Contract
    --------
    * Commands return ``CommandResult``; callers inspect ``is_success``.
    * Queries return frozen engine results and raise the typed kernel
      errors (``EntityNotFoundError``, ``ValidationError``) directly.
    * ``InvariantViolationError`` always propagates.
    """

    def __init__(
        self,
        store: EntityStore | None = None,
        config: DepartmentConfig | None = None,
        clock: Clock | None = None,
        role_authority: RoleAuthority | None = None,
    ):
        self._store = store if store is not None else InMemoryEntityStore()
        self._config = config if config is not None else get_active_config()
        self._clock = clock or SystemClock()
        self._roles = role_authority or StoreRoleAuthority(self._store)

        lifecycle = ProjectLifecycle(self._store)
        self._lifecycle = lifecycle
        self._staff = StaffService(self._store)
        self._projects = ProjectService(self._store, lifecycle, self._clock)
        self._timesheets = TimesheetService(self._store, lifecycle, self._clock)
        self._expenses = ExpenseService(
            self._store, self._clock, categories=self._config.expense_categories,
        )
        self._cash = CashService(self._store, lifecycle)

    @property
    def store(self) -> EntityStore:
        return self._store

    @property
    def config(self) -> DepartmentConfig:
        return self._config

    # =========================================================================
    # Command plumbing
    # =========================================================================

    def _as_actor(
        self,
        command: str,
        actor_id: UUID,
        call: Callable[[Actor], CommandResult],
    ) -> CommandResult:
        with LogContext.bind(correlation_id=uuid4(), actor_id=actor_id):
            try:
                actor = self._roles.actor_for(actor_id)
            except EntityNotFoundError as exc:
                logger.info(
                    "command_rejected",
                    extra={"command": command, "error_code": exc.code, "reason": "unknown actor"},
                )
                return CommandResult.failed(command, exc)
            return call(actor)

    # =========================================================================
    # Staff
    # =========================================================================

    def register_user(
        self,
        actor_id: UUID | None,
        name: str,
        role: Role | str,
        daily_rate: Decimal | int | str = Decimal("0"),
        daily_wage: Decimal | int | str = Decimal("0"),
        level: str = "junior",
        user_id: UUID | None = None,
    ) -> CommandResult:
        """Register a user.  ``actor_id`` may be None only for the first user."""
        if actor_id is None:
            with LogContext.bind(correlation_id=uuid4()):
                return self._staff.register_user(
                    None, name, role, daily_rate, daily_wage, level, user_id,
                )
        return self._as_actor(
            "register_user", actor_id,
            lambda actor: self._staff.register_user(
                actor, name, role, daily_rate, daily_wage, level, user_id,
            ),
        )

    # =========================================================================
    # Timesheets
    # =========================================================================

    def submit_timesheet(
        self,
        actor_id: UUID,
        project_id: UUID,
        start_date: date,
        end_date: date,
        total_hours: Decimal | int | str,
        description: str = "",
        entry_id: UUID | None = None,
    ) -> CommandResult:
        return self._as_actor(
            "submit_timesheet", actor_id,
            lambda actor: self._timesheets.submit(
                actor, project_id, start_date, end_date, total_hours, description, entry_id,
            ),
        )

    def approve_timesheet(self, actor_id: UUID, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return self._as_actor(
            "approve_timesheet", actor_id,
            lambda actor: self._timesheets.approve(actor, entry_id, comment),
        )

    def reject_timesheet(self, actor_id: UUID, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return self._as_actor(
            "reject_timesheet", actor_id,
            lambda actor: self._timesheets.reject(actor, entry_id, comment),
        )

    def edit_timesheet(self, actor_id: UUID, entry_id: UUID, **fields: Any) -> CommandResult:
        return self._as_actor(
            "edit_timesheet", actor_id,
            lambda actor: self._timesheets.edit(actor, entry_id, **fields),
        )

    def delete_timesheet(self, actor_id: UUID, entry_id: UUID) -> CommandResult:
        return self._as_actor(
            "delete_timesheet", actor_id,
            lambda actor: self._timesheets.delete(actor, entry_id),
        )

    # =========================================================================
    # Expenses
    # =========================================================================

    def submit_expense(
        self,
        actor_id: UUID,
        project_id: UUID,
        expense_date: date,
        category: str,
        amount: Decimal | int | str,
        description: str = "",
        receipt_url: str | None = None,
        entry_id: UUID | None = None,
    ) -> CommandResult:
        return self._as_actor(
            "submit_expense", actor_id,
            lambda actor: self._expenses.submit(
                actor, project_id, expense_date, category, amount,
                description, receipt_url, entry_id,
            ),
        )

    def advance_expense(self, actor_id: UUID, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return self._as_actor(
            "advance_expense", actor_id,
            lambda actor: self._expenses.advance(actor, entry_id, comment),
        )

    def force_approve_expense(self, actor_id: UUID, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return self._as_actor(
            "force_approve_expense", actor_id,
            lambda actor: self._expenses.force_approve(actor, entry_id, comment),
        )

    def reject_expense(self, actor_id: UUID, entry_id: UUID, comment: str | None = None) -> CommandResult:
        return self._as_actor(
            "reject_expense", actor_id,
            lambda actor: self._expenses.reject(actor, entry_id, comment),
        )

    def edit_expense(self, actor_id: UUID, entry_id: UUID, **fields: Any) -> CommandResult:
        return self._as_actor(
            "edit_expense", actor_id,
            lambda actor: self._expenses.edit(actor, entry_id, **fields),
        )

    def delete_expense(self, actor_id: UUID, entry_id: UUID) -> CommandResult:
        return self._as_actor(
            "delete_expense", actor_id,
            lambda actor: self._expenses.delete(actor, entry_id),
        )

    # =========================================================================
    # Projects
    # =========================================================================

    def create_project(
        self,
        actor_id: UUID,
        name: str,
        short_name: str,
        client_name: str,
        contract_amount: Decimal | int | str,
        development_leader_id: UUID,
        execution_leader_id: UUID,
        project_id: UUID | None = None,
    ) -> CommandResult:
        return self._as_actor(
            "create_project", actor_id,
            lambda actor: self._projects.create_project(
                actor, name, short_name, client_name, contract_amount,
                development_leader_id, execution_leader_id, project_id,
            ),
        )

    def update_project(self, actor_id: UUID, project_id: UUID, **fields: Any) -> CommandResult:
        return self._as_actor(
            "update_project", actor_id,
            lambda actor: self._projects.update_project(actor, project_id, **fields),
        )

    def set_project_completion_date(
        self,
        actor_id: UUID,
        project_id: UUID,
        completion_date: date,
    ) -> CommandResult:
        return self._as_actor(
            "set_project_completion_date", actor_id,
            lambda actor: self._projects.set_completion_date(actor, project_id, completion_date),
        )

    # =========================================================================
    # Cash receipts
    # =========================================================================

    def record_cash_receipt(
        self,
        actor_id: UUID,
        project_id: UUID,
        receipt_id: UUID | None = None,
        **fields: Any,
    ) -> CommandResult:
        return self._as_actor(
            "record_cash_receipt", actor_id,
            lambda actor: self._cash.record(actor, project_id, receipt_id, **fields),
        )

    def update_cash_receipt(self, actor_id: UUID, receipt_id: UUID, **fields: Any) -> CommandResult:
        return self._as_actor(
            "update_cash_receipt", actor_id,
            lambda actor: self._cash.update(actor, receipt_id, **fields),
        )

    def delete_cash_receipt(self, actor_id: UUID, receipt_id: UUID) -> CommandResult:
        return self._as_actor(
            "delete_cash_receipt", actor_id,
            lambda actor: self._cash.delete(actor, receipt_id),
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def _project(self, snapshot: StoreSnapshot, project_id: UUID) -> Project:
        project = snapshot.by_id(Project).get(project_id)
        if project is None:
            raise EntityNotFoundError("Project", project_id)
        return project

    @staticmethod
    def _rates(snapshot: StoreSnapshot) -> dict[UUID, Decimal]:
        return {u.id: u.daily_rate for u in snapshot.of(User)}

    def get_project_financials(
        self,
        project_id: UUID,
        cutoff_date: date | None = None,
    ) -> ProjectFinancials:
        snapshot = self._store.snapshot()
        return self._financials(snapshot, project_id, cutoff_date)

    def _financials(
        self,
        snapshot: StoreSnapshot,
        project_id: UUID,
        cutoff_date: date | None = None,
    ) -> ProjectFinancials:
        return compute_project_financials(
            self._project(snapshot, project_id),
            snapshot.of(TimesheetEntry),
            snapshot.of(ExpenseEntry),
            self._rates(snapshot),
            cutoff_date=cutoff_date,
            hours_per_day=self._config.hours_per_day,
            healthy_margin_threshold=self._config.healthy_margin_threshold,
        )

    def get_bonus_pool(
        self,
        project_id: UUID,
        salary_ratio: Decimal | str | None = None,
    ) -> Decimal:
        """``gross_profit * salary_ratio - travel_expense``.

        Falls back to the configured ratio for the project when
        ``salary_ratio`` is None.
        """
        ratio = salary_ratio if salary_ratio is not None else self._config.salary_ratio_for(project_id)
        if ratio is None:
            raise ValidationError("salary_ratio", "no ratio supplied or configured")
        try:
            ratio = Decimal(str(ratio))
        except InvalidOperation as exc:
            raise ValidationError("salary_ratio", f"expected a number, got {ratio!r}") from exc
        snapshot = self._store.snapshot()
        return bonus_pool(self._financials(snapshot, project_id), ratio)

    def get_executor_cash_summary(self, executor_id: UUID) -> CashSummary:
        snapshot = self._store.snapshot()
        return summarize_for_executor(
            executor_id, snapshot.of(Project), snapshot.of(CashReceipt),
        )

    def get_project_cash_summary(self) -> dict[UUID, CashSummary]:
        """Receipt totals for every project (empty totals where none recorded)."""
        snapshot = self._store.snapshot()
        by_project = summarize_by_project(snapshot.of(CashReceipt))
        return {p.id: by_project.get(p.id, CashSummary()) for p in snapshot.of(Project)}

    def get_timesheet_summary(self) -> TimesheetSummary:
        snapshot = self._store.snapshot()
        return timesheet_summary(
            snapshot.of(Project),
            snapshot.of(User),
            snapshot.of(TimesheetEntry),
            self._config.hours_per_day,
        )

    def get_department_profit_summary(self) -> DepartmentProfitSummary:
        snapshot = self._store.snapshot()
        return department_profit_summary(
            snapshot.of(Project),
            snapshot.of(User),
            snapshot.of(TimesheetEntry),
            snapshot.of(ExpenseEntry),
            snapshot.of(CashReceipt),
            self._rates(snapshot),
            self._config.hours_per_day,
        )

    def get_employee_bonus_table(self) -> tuple[EmployeeBonusRow, ...]:
        snapshot = self._store.snapshot()
        return employee_bonus_table(
            snapshot.of(Project),
            snapshot.of(User),
            snapshot.of(TimesheetEntry),
            snapshot.of(ExpenseEntry),
            hours_per_day=self._config.hours_per_day,
            bonus_rate=self._config.employee_bonus_rate,
        )
