"""Project Lifecycle Workflow.

System-driven state machine: every transition is fired by a trigger from
another module, never by a user directly.
"""

from enum import Enum

from gp_kernel.domain.workflow import Guard, Transition, Workflow
from gp_kernel.logging_config import get_logger

logger = get_logger("modules.project.workflows")


class LifecycleTrigger(str, Enum):
    """Events that may advance a project's status."""
    TIMESHEET_CREATED = "timesheet_created"
    COMPLETION_DATE_SET = "completion_date_set"
    INVOICE_RECORDED = "invoice_recorded"
    RECEIPT_CONFIRMED = "receipt_confirmed"


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

EXACT_PREDECESSOR = Guard(
    name="exact_predecessor",
    description="Project is in the trigger's predecessor status; otherwise the trigger is a no-op",
)


# -----------------------------------------------------------------------------
# Project Lifecycle Workflow
# -----------------------------------------------------------------------------

PROJECT_LIFECYCLE_WORKFLOW = Workflow(
    name="project_lifecycle",
    description="Project status driven by timesheets, completion and receipts",
    initial_state="not_started",
    states=(
        "not_started",
        "in_progress",
        "completed",
        "invoiced",
        "received",
    ),
    transitions=(
        Transition(
            "not_started", "in_progress",
            action=LifecycleTrigger.TIMESHEET_CREATED.value,
            guard=EXACT_PREDECESSOR,
        ),
        Transition(
            "in_progress", "completed",
            action=LifecycleTrigger.COMPLETION_DATE_SET.value,
            guard=EXACT_PREDECESSOR,
        ),
        Transition(
            "completed", "invoiced",
            action=LifecycleTrigger.INVOICE_RECORDED.value,
            guard=EXACT_PREDECESSOR,
        ),
        Transition(
            "invoiced", "received",
            action=LifecycleTrigger.RECEIPT_CONFIRMED.value,
            guard=EXACT_PREDECESSOR,
        ),
    ),
    terminal_states=("received",),
)


def transition_for_trigger(trigger: LifecycleTrigger) -> Transition:
    """Each trigger owns exactly one transition."""
    for t in PROJECT_LIFECYCLE_WORKFLOW.transitions:
        if t.action == trigger.value:
            return t
    raise KeyError(trigger)


logger.info(
    "project_lifecycle_workflow_registered",
    extra={
        "workflow_name": PROJECT_LIFECYCLE_WORKFLOW.name,
        "state_count": len(PROJECT_LIFECYCLE_WORKFLOW.states),
        "transition_count": len(PROJECT_LIFECYCLE_WORKFLOW.transitions),
    },
)
