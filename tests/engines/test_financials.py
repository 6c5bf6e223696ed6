"""
Tests for the financial aggregation engine.

Records are built directly; the engine never touches the store.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from gp_engines.financials import (
    MarginBand,
    bonus_pool,
    compute_project_financials,
    department_profit_summary,
    employee_bonus_table,
    margin_band,
    percent_of,
    timesheet_summary,
)
from gp_kernel.domain.actor import Role
from gp_kernel.exceptions import ValidationError
from gp_modules.cash.models import CashReceipt
from gp_modules.expense.models import ExpenseEntry, ExpenseStatus
from gp_modules.project.models import Project
from gp_modules.staff.models import User
from gp_modules.timesheet.models import TimesheetEntry, TimesheetStatus


def _user(name, role=Role.EMPLOYEE, rate="1200"):
    return User(id=uuid4(), name=name, role=role, daily_rate=Decimal(rate))


def _project(short_name="ALP", contract="100000", leader=None):
    leader = leader or uuid4()
    return Project(
        id=uuid4(), name=short_name, short_name=short_name, client_name="Client",
        contract_amount=Decimal(contract),
        development_leader_id=leader, execution_leader_id=leader,
    )


def _sheet(user, project, hours, status=TimesheetStatus.APPROVED, end=date(2024, 3, 8)):
    return TimesheetEntry(
        id=uuid4(), user_id=user.id, project_id=project.id,
        start_date=end, end_date=end, total_hours=Decimal(hours), status=status,
    )


def _claim(user, project, amount, status=ExpenseStatus.APPROVED, on=date(2024, 3, 5)):
    return ExpenseEntry(
        id=uuid4(), user_id=user.id, project_id=project.id, expense_date=on,
        category="lodging", amount=Decimal(amount), status=status,
    )


class TestProjectFinancials:

    def test_labor_cost_forty_hours_at_1200(self):
        user = _user("Eli")
        project = _project(contract="150000")
        fin = compute_project_financials(
            project, [_sheet(user, project, "40")], [], {user.id: user.daily_rate},
        )
        assert fin.labor_cost == Decimal("6000")
        assert fin.approved_hours == Decimal("40")
        assert fin.project_days == Decimal("5")

    def test_only_approved_records_count(self):
        user = _user("Eli")
        project = _project()
        sheets = [
            _sheet(user, project, "8"),
            _sheet(user, project, "8", status=TimesheetStatus.PENDING),
            _sheet(user, project, "8", status=TimesheetStatus.REJECTED),
        ]
        claims = [
            _claim(user, project, "300"),
            _claim(user, project, "999", status=ExpenseStatus.SECRETARY_APPROVED),
        ]
        fin = compute_project_financials(project, sheets, claims, {user.id: user.daily_rate})
        assert fin.labor_cost == Decimal("1200")
        assert fin.travel_expense == Decimal("300")
        assert fin.gross_profit == Decimal("100000") - Decimal("1200") - Decimal("300")

    def test_cutoff_date_filters_by_end_date_and_expense_date(self):
        user = _user("Eli")
        project = _project()
        sheets = [_sheet(user, project, "8", end=date(2024, 1, 31)), _sheet(user, project, "8", end=date(2024, 2, 1))]
        claims = [_claim(user, project, "100", on=date(2024, 1, 31)), _claim(user, project, "50", on=date(2024, 2, 2))]
        fin = compute_project_financials(
            project, sheets, claims, {user.id: user.daily_rate}, cutoff_date=date(2024, 1, 31),
        )
        assert fin.labor_cost == Decimal("1200")
        assert fin.travel_expense == Decimal("100")
        assert fin.cutoff_date == date(2024, 1, 31)

    def test_other_projects_are_ignored(self):
        user = _user("Eli")
        project, other = _project(), _project("BET")
        fin = compute_project_financials(
            project, [_sheet(user, other, "80")], [_claim(user, other, "10")], {user.id: user.daily_rate},
        )
        assert fin.labor_cost == 0
        assert fin.travel_expense == 0

    def test_rates_and_margin(self):
        user = _user("Eli")
        project = _project(contract="100000")
        fin = compute_project_financials(
            project,
            [_sheet(user, project, "80")],  # 10 days * 1200 = 12000
            [_claim(user, project, "3000")],
            {user.id: user.daily_rate},
        )
        assert fin.gross_profit == Decimal("85000")
        assert fin.margin == Decimal("85.00")
        assert fin.labor_cost_rate == Decimal("12.00")
        assert fin.travel_expense_rate == Decimal("3.00")
        assert fin.margin_band is MarginBand.HEALTHY

    def test_zero_contract_gives_zero_percentages(self):
        user = _user("Eli")
        project = _project(contract="0")
        fin = compute_project_financials(
            project, [_sheet(user, project, "8")], [], {user.id: user.daily_rate},
        )
        assert fin.gross_profit == Decimal("-1200")
        assert fin.margin == 0
        assert fin.labor_cost_rate == 0
        assert fin.travel_expense_rate == 0

    def test_hours_per_day_is_configurable(self):
        user = _user("Eli", rate="1000")
        project = _project()
        fin = compute_project_financials(
            project, [_sheet(user, project, "10")], [], {user.id: user.daily_rate},
            hours_per_day=Decimal("10"),
        )
        assert fin.labor_cost == Decimal("1000")


class TestMarginBandAndPercent:

    @pytest.mark.parametrize("margin, band", [
        (Decimal("30"), MarginBand.HEALTHY),
        (Decimal("29.99"), MarginBand.THIN),
        (Decimal("0"), MarginBand.THIN),
        (Decimal("-0.01"), MarginBand.LOSS),
    ])
    def test_band_edges(self, margin, band):
        assert margin_band(margin) is band

    def test_percent_rounds_half_up(self):
        assert percent_of(Decimal("1"), Decimal("8")) == Decimal("12.50")
        assert percent_of(Decimal("1"), Decimal("3")) == Decimal("33.33")


class TestBonusPool:

    def test_formula(self):
        user = _user("Eli")
        project = _project(contract="100000")
        fin = compute_project_financials(
            project, [_sheet(user, project, "80")], [_claim(user, project, "3000")],
            {user.id: user.daily_rate},
        )
        # 85000 * 0.3 - 3000
        assert bonus_pool(fin, Decimal("0.3")) == Decimal("22500")

    @pytest.mark.parametrize("ratio", ["-0.01", "1.01", "NaN", "sNaN", "Infinity"])
    def test_ratio_rejected(self, ratio):
        project = _project()
        fin = compute_project_financials(project, [], [], {})
        with pytest.raises(ValidationError) as exc_info:
            bonus_pool(fin, Decimal(ratio))
        assert exc_info.value.field == "salary_ratio"

    @pytest.mark.parametrize("ratio", ["0", "1"])
    def test_ratio_bounds_inclusive(self, ratio):
        fin = compute_project_financials(_project(contract="1000"), [], [], {})
        assert bonus_pool(fin, Decimal(ratio)) == Decimal("1000") * Decimal(ratio)


class TestSummaries:

    def test_timesheet_summary_sorted_by_short_name_then_user(self):
        ana, zed = _user("Ana"), _user("Zed")
        alpha, beta = _project("ALP"), _project("BET")
        sheets = [
            _sheet(zed, beta, "8"),
            _sheet(ana, beta, "4"),
            _sheet(zed, alpha, "16"),
            _sheet(zed, alpha, "8"),
            _sheet(ana, alpha, "99", status=TimesheetStatus.PENDING),
        ]
        summary = timesheet_summary([alpha, beta], [ana, zed], sheets)

        assert [(r.project_short_name, r.user_name, r.hours) for r in summary.rows] == [
            ("ALP", "Zed", Decimal("24")),
            ("BET", "Ana", Decimal("4")),
            ("BET", "Zed", Decimal("8")),
        ]
        assert summary.project_totals[alpha.id] == Decimal("24")
        assert summary.project_totals[beta.id] == Decimal("12")
        assert summary.total_hours == Decimal("36")
        assert summary.rows[0].days == Decimal("3")

    def test_department_profit_summary(self):
        emp = _user("Eli")
        intern = _user("Ira", role=Role.INTERN, rate="400")
        head = _user("Harper", role=Role.DEPARTMENT_HEAD, rate="3000")
        alpha, beta = _project("ALP", "100000"), _project("BET", "50000")
        receipts = [
            CashReceipt(id=uuid4(), project_id=alpha.id, confirmed_receipt=Decimal("60000"),
                        adjusted_receipt=Decimal("60000")),
        ]
        users = [emp, intern, head]
        summary = department_profit_summary(
            [alpha, beta],
            users,
            [_sheet(emp, alpha, "80"), _sheet(intern, beta, "16")],
            [_claim(emp, alpha, "1000")],
            receipts,
            {u.id: u.daily_rate for u in users},
        )

        assert summary.project_count == 2
        assert summary.fee_earner_count == 2
        assert summary.total_contract_amount == Decimal("150000")
        assert summary.total_confirmed_receipts == Decimal("60000")
        assert summary.accounts_receivable == Decimal("90000")
        assert summary.total_labor_cost == Decimal("12800")
        assert summary.total_travel_expense == Decimal("1000")
        assert summary.gross_profit == Decimal("136200")
        assert summary.gross_margin == Decimal("90.80")

    def test_employee_bonus_table(self):
        eli = _user("Eli")
        ira = _user("Ira", role=Role.INTERN, rate="400")
        pm = _user("Morgan", role=Role.PROJECT_MANAGER, rate="2000")
        project = _project("ALP", "100000")
        loss = _project("BET", "0")
        sheets = [
            _sheet(eli, project, "24"),   # 3 days * 1200 = 3600
            _sheet(ira, project, "8"),    # 1 day * 400 = 400
            _sheet(pm, project, "8"),     # 1 day * 2000 = 2000
            _sheet(ira, loss, "8"),       # loss project: -400
        ]
        rows = employee_bonus_table([project, loss], [eli, ira, pm], sheets, [])

        assert [r.user_name for r in rows] == ["Eli", "Ira"]
        eli_row, ira_row = rows
        # ALP gross profit = 100000 - 6000 = 94000 over 40 approved hours
        assert eli_row.total_contribution == Decimal("94000") * 24 / 40
        assert eli_row.bonus == eli_row.total_contribution * Decimal("0.10")
        assert eli_row.labor_cost == Decimal("3600")
        assert ira_row.approved_hours == Decimal("16")
        assert ira_row.total_contribution == Decimal("94000") * 8 / 40 - Decimal("400")

    def test_bonus_is_never_negative(self):
        ira = _user("Ira", role=Role.INTERN, rate="400")
        loss = _project("BET", "0")
        rows = employee_bonus_table([loss], [ira], [_sheet(ira, loss, "8")], [])
        assert rows[0].total_contribution == Decimal("-400")
        assert rows[0].bonus == 0
