"""Timesheet Workflows.

State machine for timesheet approval.
"""

from gp_kernel.domain.actor import Capability
from gp_kernel.domain.workflow import Transition, Workflow
from gp_kernel.logging_config import get_logger

logger = get_logger("modules.timesheet.workflows")


TIMESHEET_APPROVAL_WORKFLOW = Workflow(
    name="timesheet_approval",
    description="Timesheet review by the department head or the project's manager",
    initial_state="pending",
    states=(
        "pending",
        "approved",
        "rejected",
    ),
    transitions=(
        Transition("pending", "approved", action="approve", capability=Capability.TIMESHEET_REVIEW),
        Transition("pending", "rejected", action="reject", capability=Capability.TIMESHEET_REVIEW),
    ),
    terminal_states=("approved", "rejected"),
)

logger.info(
    "timesheet_workflow_registered",
    extra={
        "workflow_name": TIMESHEET_APPROVAL_WORKFLOW.name,
        "state_count": len(TIMESHEET_APPROVAL_WORKFLOW.states),
        "transition_count": len(TIMESHEET_APPROVAL_WORKFLOW.transitions),
        "initial_state": TIMESHEET_APPROVAL_WORKFLOW.initial_state,
    },
)
