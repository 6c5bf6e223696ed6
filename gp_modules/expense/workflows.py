"""Travel Expense Workflows.

Four-stage approval chain for expense claims:

    pending -> executor_approved -> secretary_approved -> approved

``advance`` moves one stage and needs the capability of the current stage.
``force_approve`` jumps straight to approved (department-head override).
``reject`` is allowed from every non-terminal state.
"""

from gp_kernel.domain.actor import Capability
from gp_kernel.domain.workflow import Guard, Transition, Workflow
from gp_kernel.logging_config import get_logger

logger = get_logger("modules.expense.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

HEAD_MAY_ALWAYS_REJECT = Guard(
    name="head_may_always_reject",
    description="The department head may reject at any stage in addition to the stage reviewer",
)

logger.info(
    "expense_workflow_guards_defined",
    extra={"guards": [HEAD_MAY_ALWAYS_REJECT.name]},
)


# Stage -> capability needed to move it forward
STAGE_CAPABILITIES: dict[str, Capability] = {
    "pending": Capability.EXPENSE_EXECUTOR_REVIEW,
    "executor_approved": Capability.EXPENSE_SECRETARY_REVIEW,
    "secretary_approved": Capability.EXPENSE_HEAD_REVIEW,
}

_NEXT_STAGE = {
    "pending": "executor_approved",
    "executor_approved": "secretary_approved",
    "secretary_approved": "approved",
}


def _stage_transitions(stage: str) -> tuple[Transition, ...]:
    capability = STAGE_CAPABILITIES[stage]
    return (
        Transition(stage, _NEXT_STAGE[stage], action="advance", capability=capability),
        Transition(stage, "approved", action="force_approve", capability=Capability.EXPENSE_OVERRIDE),
        Transition(stage, "rejected", action="reject", capability=capability, guard=HEAD_MAY_ALWAYS_REJECT),
    )


# -----------------------------------------------------------------------------
# Expense Approval Workflow
# -----------------------------------------------------------------------------

EXPENSE_APPROVAL_WORKFLOW = Workflow(
    name="expense_approval",
    description="Expense claim approval: execution leader, secretary, department head",
    initial_state="pending",
    states=(
        "pending",
        "executor_approved",
        "secretary_approved",
        "approved",
        "rejected",
    ),
    transitions=(
        *_stage_transitions("pending"),
        *_stage_transitions("executor_approved"),
        *_stage_transitions("secretary_approved"),
    ),
    terminal_states=("approved", "rejected"),
)

logger.info(
    "expense_approval_workflow_registered",
    extra={
        "workflow_name": EXPENSE_APPROVAL_WORKFLOW.name,
        "state_count": len(EXPENSE_APPROVAL_WORKFLOW.states),
        "transition_count": len(EXPENSE_APPROVAL_WORKFLOW.transitions),
        "initial_state": EXPENSE_APPROVAL_WORKFLOW.initial_state,
    },
)
