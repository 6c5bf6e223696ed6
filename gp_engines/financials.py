"""
gp_engines.financials -- Gross profit, margin, bonus pool and staff summaries.

Responsibility:
    Pure aggregation over approved timesheets and approved expenses:
    labor cost, travel expense, gross profit, margin and cost rates per
    project; the project bonus pool; project days; the timesheet summary;
    the department profit summary; the employee bonus table.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Records are consumed structurally (anything with the documented
    attributes), so the engine never imports module packages.

Invariants enforced:
    - Identical inputs produce identical outputs; no clock access.
    - Only ``approved`` timesheets and expenses count.  A cutoff date, when
      given, keeps timesheets with ``end_date <= cutoff`` and expenses with
      ``expense_date <= cutoff``.
    - Revenue basis is ``contract_amount``.
    - Percentages are 0 when the contract amount is 0.
    - ``salary_ratio`` must lie in [0, 1].

Failure modes:
    - ValidationError from ``bonus_pool`` for an out-of-range ratio.

Usage:
    from gp_engines.financials import compute_project_financials

    fin = compute_project_financials(
        project, timesheets, expenses, rates={user.id: user.daily_rate},
    )
    print(fin.gross_profit, fin.margin, fin.margin_band)
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from gp_kernel.domain.actor import FEE_EARNING_ROLES
from gp_kernel.exceptions import ValidationError
from gp_kernel.logging_config import get_logger

logger = get_logger("engines.financials")

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DEFAULT_HOURS_PER_DAY = Decimal("8")
DEFAULT_HEALTHY_MARGIN = Decimal("30")
DEFAULT_EMPLOYEE_BONUS_RATE = Decimal("0.10")

APPROVED = "approved"


class MarginBand(str, Enum):
    """Coarse classification of a gross margin."""

    HEALTHY = "healthy"
    THIN = "thin"
    LOSS = "loss"


@dataclass(frozen=True)
class ProjectFinancials:
    """Figures for one project at one cutoff."""

    project_id: UUID
    contract_amount: Decimal
    labor_cost: Decimal
    travel_expense: Decimal
    gross_profit: Decimal
    margin: Decimal
    labor_cost_rate: Decimal
    travel_expense_rate: Decimal
    approved_hours: Decimal
    project_days: Decimal
    margin_band: MarginBand
    cutoff_date: date | None = None


@dataclass(frozen=True)
class TimesheetSummaryRow:
    project_id: UUID
    project_short_name: str
    user_id: UUID
    user_name: str
    hours: Decimal
    days: Decimal


@dataclass(frozen=True)
class TimesheetSummary:
    """Approved hours by (project, user), sorted by short name then user name."""

    rows: tuple[TimesheetSummaryRow, ...]
    project_totals: Mapping[UUID, Decimal]
    total_hours: Decimal


@dataclass(frozen=True)
class DepartmentProfitSummary:
    project_count: int
    fee_earner_count: int
    total_contract_amount: Decimal
    total_confirmed_receipts: Decimal
    accounts_receivable: Decimal
    total_labor_cost: Decimal
    total_travel_expense: Decimal
    gross_profit: Decimal
    gross_margin: Decimal


@dataclass(frozen=True)
class ProjectContribution:
    project_id: UUID
    hours: Decimal
    contribution: Decimal


@dataclass(frozen=True)
class EmployeeBonusRow:
    user_id: UUID
    user_name: str
    approved_hours: Decimal
    labor_cost: Decimal
    contributions: tuple[ProjectContribution, ...]
    total_contribution: Decimal
    bonus: Decimal


# ---------------------------------------------------------------------------
# Primitive helpers
# ---------------------------------------------------------------------------


def _is_approved(record: Any) -> bool:
    return record.status == APPROVED


def _within(day: date | None, cutoff: date | None) -> bool:
    return cutoff is None or (day is not None and day <= cutoff)


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """``part / whole * 100`` to two places; 0 when ``whole`` is 0."""
    if whole == ZERO:
        return ZERO
    return (part / whole * HUNDRED).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def margin_band(margin: Decimal, healthy_threshold: Decimal = DEFAULT_HEALTHY_MARGIN) -> MarginBand:
    if margin >= healthy_threshold:
        return MarginBand.HEALTHY
    if margin >= ZERO:
        return MarginBand.THIN
    return MarginBand.LOSS


def approved_timesheets(
    timesheets: Iterable[Any],
    project_id: UUID | None = None,
    cutoff: date | None = None,
) -> list[Any]:
    return [
        t for t in timesheets
        if _is_approved(t)
        and (project_id is None or t.project_id == project_id)
        and _within(t.end_date, cutoff)
    ]


def approved_expenses(
    expenses: Iterable[Any],
    project_id: UUID | None = None,
    cutoff: date | None = None,
) -> list[Any]:
    return [
        e for e in expenses
        if _is_approved(e)
        and (project_id is None or e.project_id == project_id)
        and _within(e.expense_date, cutoff)
    ]


def labor_cost(
    timesheets: Iterable[Any],
    rates: Mapping[UUID, Decimal],
    hours_per_day: Decimal = DEFAULT_HOURS_PER_DAY,
) -> Decimal:
    """Sum of ``hours * daily_rate / hours_per_day`` over the given entries.

    Callers pass already-filtered entries (see ``approved_timesheets``).
    """
    total = ZERO
    for t in timesheets:
        total += t.total_hours * rates.get(t.user_id, ZERO) / hours_per_day
    return total


def travel_expense(expenses: Iterable[Any]) -> Decimal:
    return sum((e.amount for e in expenses), ZERO)


def total_hours(timesheets: Iterable[Any]) -> Decimal:
    return sum((t.total_hours for t in timesheets), ZERO)


def project_days(hours: Decimal, hours_per_day: Decimal = DEFAULT_HOURS_PER_DAY) -> Decimal:
    return hours / hours_per_day


# ---------------------------------------------------------------------------
# Per-project figures
# ---------------------------------------------------------------------------


def compute_project_financials(
    project: Any,
    timesheets: Iterable[Any],
    expenses: Iterable[Any],
    rates: Mapping[UUID, Decimal],
    *,
    cutoff_date: date | None = None,
    hours_per_day: Decimal = DEFAULT_HOURS_PER_DAY,
    healthy_margin_threshold: Decimal = DEFAULT_HEALTHY_MARGIN,
) -> ProjectFinancials:
    """Labor cost, travel expense, gross profit and rates for one project."""
    sheets = approved_timesheets(timesheets, project.id, cutoff_date)
    claims = approved_expenses(expenses, project.id, cutoff_date)

    contract = project.contract_amount
    labor = labor_cost(sheets, rates, hours_per_day)
    travel = travel_expense(claims)
    gross = contract - labor - travel
    hours = total_hours(sheets)
    margin = percent_of(gross, contract)

    logger.debug(
        "project_financials_computed",
        extra={
            "project_id": str(project.id),
            "timesheet_count": len(sheets),
            "expense_count": len(claims),
        },
    )

    return ProjectFinancials(
        project_id=project.id,
        contract_amount=contract,
        labor_cost=labor,
        travel_expense=travel,
        gross_profit=gross,
        margin=margin,
        labor_cost_rate=percent_of(labor, contract),
        travel_expense_rate=percent_of(travel, contract),
        approved_hours=hours,
        project_days=project_days(hours, hours_per_day),
        margin_band=margin_band(margin, healthy_margin_threshold),
        cutoff_date=cutoff_date,
    )


def bonus_pool(financials: ProjectFinancials, salary_ratio: Decimal) -> Decimal:
    """``gross_profit * salary_ratio - travel_expense``.

    Raises:
        ValidationError: if ``salary_ratio`` is not a finite number in [0, 1].
    """
    ratio = Decimal(salary_ratio)
    if not ratio.is_finite() or ratio < ZERO or ratio > Decimal("1"):
        raise ValidationError("salary_ratio", f"{ratio} is outside [0, 1]")
    return financials.gross_profit * ratio - financials.travel_expense


# ---------------------------------------------------------------------------
# Department-wide summaries
# ---------------------------------------------------------------------------


def timesheet_summary(
    projects: Iterable[Any],
    users: Iterable[Any],
    timesheets: Iterable[Any],
    hours_per_day: Decimal = DEFAULT_HOURS_PER_DAY,
) -> TimesheetSummary:
    """Approved hours grouped by (project, user)."""
    project_by_id = {p.id: p for p in projects}
    user_by_id = {u.id: u for u in users}

    hours: dict[tuple[UUID, UUID], Decimal] = defaultdict(lambda: ZERO)
    for t in approved_timesheets(timesheets):
        hours[(t.project_id, t.user_id)] += t.total_hours

    rows = []
    project_totals: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
    for (project_id, user_id), h in hours.items():
        project = project_by_id.get(project_id)
        user = user_by_id.get(user_id)
        rows.append(TimesheetSummaryRow(
            project_id=project_id,
            project_short_name=project.short_name if project else "",
            user_id=user_id,
            user_name=user.name if user else "",
            hours=h,
            days=project_days(h, hours_per_day),
        ))
        project_totals[project_id] += h

    rows.sort(key=lambda r: (r.project_short_name, r.user_name))
    return TimesheetSummary(
        rows=tuple(rows),
        project_totals=dict(project_totals),
        total_hours=sum(project_totals.values(), ZERO),
    )


def department_profit_summary(
    projects: Iterable[Any],
    users: Iterable[Any],
    timesheets: Iterable[Any],
    expenses: Iterable[Any],
    receipts: Iterable[Any],
    rates: Mapping[UUID, Decimal],
    hours_per_day: Decimal = DEFAULT_HOURS_PER_DAY,
) -> DepartmentProfitSummary:
    projects = list(projects)
    project_ids = {p.id for p in projects}
    sheets = [t for t in approved_timesheets(timesheets) if t.project_id in project_ids]
    claims = [e for e in approved_expenses(expenses) if e.project_id in project_ids]

    contract = sum((p.contract_amount for p in projects), ZERO)
    confirmed = sum(
        (r.confirmed_receipt for r in receipts if r.project_id in project_ids), ZERO,
    )
    labor = labor_cost(sheets, rates, hours_per_day)
    travel = travel_expense(claims)
    gross = contract - labor - travel

    return DepartmentProfitSummary(
        project_count=len(projects),
        fee_earner_count=sum(1 for u in users if u.role in FEE_EARNING_ROLES),
        total_contract_amount=contract,
        total_confirmed_receipts=confirmed,
        accounts_receivable=contract - confirmed,
        total_labor_cost=labor,
        total_travel_expense=travel,
        gross_profit=gross,
        gross_margin=percent_of(gross, contract),
    )


def employee_bonus_table(
    projects: Iterable[Any],
    users: Iterable[Any],
    timesheets: Iterable[Any],
    expenses: Iterable[Any],
    *,
    hours_per_day: Decimal = DEFAULT_HOURS_PER_DAY,
    bonus_rate: Decimal = DEFAULT_EMPLOYEE_BONUS_RATE,
) -> tuple[EmployeeBonusRow, ...]:
    """Per-employee profit contribution and bonus.

    A user's contribution to a project is the project's gross profit
    weighted by the user's share of the project's approved hours.  The
    bonus is ``max(0, total contribution * bonus_rate)``.
    """
    users = list(users)
    timesheets = list(timesheets)
    expenses = list(expenses)
    rates = {u.id: u.daily_rate for u in users}

    gross_by_project: dict[UUID, Decimal] = {}
    hours_by_project: dict[UUID, Decimal] = {}
    for project in projects:
        fin = compute_project_financials(
            project, timesheets, expenses, rates, hours_per_day=hours_per_day,
        )
        gross_by_project[project.id] = fin.gross_profit
        hours_by_project[project.id] = fin.approved_hours

    approved = approved_timesheets(timesheets)
    rows = []
    for user in users:
        if user.role not in FEE_EARNING_ROLES:
            continue
        own = [t for t in approved if t.user_id == user.id]
        per_project: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
        for t in own:
            per_project[t.project_id] += t.total_hours

        contributions = []
        for project_id, h in sorted(per_project.items(), key=lambda kv: str(kv[0])):
            project_hours = hours_by_project.get(project_id, ZERO)
            if project_hours == ZERO:
                continue
            contributions.append(ProjectContribution(
                project_id=project_id,
                hours=h,
                contribution=gross_by_project[project_id] * h / project_hours,
            ))

        total = sum((c.contribution for c in contributions), ZERO)
        rows.append(EmployeeBonusRow(
            user_id=user.id,
            user_name=user.name,
            approved_hours=total_hours(own),
            labor_cost=labor_cost(own, rates, hours_per_day),
            contributions=tuple(contributions),
            total_contribution=total,
            bonus=max(ZERO, total * bonus_rate),
        ))

    rows.sort(key=lambda r: r.user_name)
    return tuple(rows)
