"""
Racing commands against one record.

Two reviewers approving the same pending entry must produce exactly one
approval; the loser sees either the terminal state or a stale version.
Concurrent submissions on a fresh project advance it exactly once.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from threading import Barrier

import pytest

from gp_kernel.store.memory import InMemoryEntityStore
from gp_modules._command_helpers import CommandStatus
from gp_modules.project.models import Project, ProjectStatus
from gp_modules.timesheet.models import TimesheetEntry, TimesheetStatus
from gp_services import DepartmentOperations

LOSING_STATUSES = {CommandStatus.INVALID_TRANSITION, CommandStatus.CONCURRENT_MODIFICATION}


class _BarrierStore(InMemoryEntityStore):
    """Holds every reader of a timesheet entry until ``parties`` readers arrived."""

    def __init__(self, parties):
        super().__init__()
        self.barrier = Barrier(parties, timeout=5)
        self.armed = False

    def get(self, entity_type, entity_id):
        record = super().get(entity_type, entity_id)
        if self.armed and entity_type is TimesheetEntry:
            self.barrier.wait()
        return record


def _race(*calls):
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(call) for call in calls]
        return [f.result() for f in futures]


class TestApprovalRace:

    def test_exactly_one_approval_wins(self, ops, staff, submit_timesheet):
        entry = submit_timesheet()

        results = _race(
            lambda: ops.approve_timesheet(staff.head, entry.id),
            lambda: ops.approve_timesheet(staff.pm, entry.id),
        )

        winners = [r for r in results if r.is_success]
        assert len(winners) == 1
        assert {r.status for r in results if not r.is_success} <= LOSING_STATUSES
        stored = ops.store.get(TimesheetEntry, entry.id)
        assert stored.status is TimesheetStatus.APPROVED
        assert stored.version == entry.version + 1

    def test_interleaved_reads_lose_on_version(self, config, clock):
        store = _BarrierStore(parties=2)
        ops = DepartmentOperations(store=store, config=config, clock=clock)
        head = ops.register_user(None, "Harper Head", "department_head").entity
        project = ops.create_project(
            head.id, "Race", "RCE", "Client", "1000", head.id, head.id,
        ).entity
        entry = ops.submit_timesheet(head.id, project.id, date(2024, 3, 4), date(2024, 3, 8), "8").entity

        store.armed = True
        results = _race(
            lambda: ops.approve_timesheet(head.id, entry.id),
            lambda: ops.reject_timesheet(head.id, entry.id),
        )

        store.armed = False
        statuses = sorted(r.status.value for r in results)
        assert statuses == [CommandStatus.APPLIED.value, CommandStatus.CONCURRENT_MODIFICATION.value]
        assert store.get(TimesheetEntry, entry.id).version == 2


class TestLifecycleRace:

    @pytest.mark.parametrize("submitters", [4, 8])
    def test_concurrent_first_timesheets_start_project_once(self, ops, staff, project, submit_timesheet, submitters):
        _race(*[lambda: submit_timesheet(hours="1") for _ in range(submitters)])

        stored = ops.store.get(Project, project.id)
        assert stored.status is ProjectStatus.IN_PROGRESS
        assert stored.version == project.version + 1
        assert len(ops.store.list(TimesheetEntry)) == submitters
