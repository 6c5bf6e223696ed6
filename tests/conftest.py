"""
Pytest fixtures for the department operations test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- ``captured_logs`` for asserting on JSON log events
- A deterministic clock, an in-memory store and a facade over both
- A seeded department (head, two project managers, secretary, employee,
  intern) and one project led by the first project manager
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import UUID

import pytest

from gp_config.schema import DepartmentConfig
from gp_kernel.domain.clock import DeterministicClock
from gp_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from gp_kernel.store.memory import InMemoryEntityStore
from gp_modules.project.models import Project
from gp_services.department_operations import DepartmentOperations


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture gp_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ops):
            ops.approve_timesheet(...)
            logs = captured_logs()
            assert any(r["message"] == "command_applied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("gp_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Core fixtures
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock()


@pytest.fixture
def store():
    return InMemoryEntityStore()


@pytest.fixture
def config():
    return DepartmentConfig(default_salary_ratio=Decimal("0.30"))


@pytest.fixture
def ops(store, config, clock):
    return DepartmentOperations(store=store, config=config, clock=clock)


# =============================================================================
# Seeded department
# =============================================================================


@dataclass(frozen=True)
class Staff:
    head: UUID
    pm: UUID
    other_pm: UUID
    secretary: UUID
    employee: UUID
    intern: UUID


def _register(ops, actor_id, name, role, rate="0", wage="0"):
    result = ops.register_user(actor_id, name, role, daily_rate=rate, daily_wage=wage)
    assert result.is_success, result.message
    return result.entity.id


@pytest.fixture
def staff(ops):
    head = _register(ops, None, "Harper Head", "department_head", "3000", "2500")
    return Staff(
        head=head,
        pm=_register(ops, head, "Morgan Manager", "project_manager", "2000", "1600"),
        other_pm=_register(ops, head, "Quinn Manager", "project_manager", "2000", "1600"),
        secretary=_register(ops, head, "Sasha Secretary", "secretary", "800", "600"),
        employee=_register(ops, head, "Eli Employee", "employee", "1200", "900"),
        intern=_register(ops, head, "Ira Intern", "intern", "400", "300"),
    )


@pytest.fixture
def project(ops, staff) -> Project:
    """A 150000 contract led by ``staff.pm``."""
    result = ops.create_project(
        staff.head,
        name="Harbour Logistics Review",
        short_name="HLR",
        client_name="Harbour Co",
        contract_amount=Decimal("150000"),
        development_leader_id=staff.head,
        execution_leader_id=staff.pm,
    )
    assert result.is_success, result.message
    return result.entity


@pytest.fixture
def submit_timesheet(ops, staff, project):
    """Submit a timesheet for ``staff.employee`` on ``project`` (overridable)."""

    def _submit(hours="40", user=None, project_id=None, start=date(2024, 3, 4), end=date(2024, 3, 8)):
        result = ops.submit_timesheet(
            user or staff.employee,
            project_id or project.id,
            start,
            end,
            hours,
            description="Fieldwork",
        )
        assert result.is_success, result.message
        return result.entity

    return _submit


@pytest.fixture
def submit_expense(ops, staff, project):
    """Submit an expense claim for ``staff.employee`` on ``project``."""

    def _submit(amount="500", user=None, category="lodging", expense_date=date(2024, 3, 5)):
        result = ops.submit_expense(
            user or staff.employee,
            project.id,
            expense_date,
            category,
            amount,
            description="Hotel",
        )
        assert result.is_success, result.message
        return result.entity

    return _submit
