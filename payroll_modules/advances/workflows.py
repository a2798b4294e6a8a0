"""
Salary Advance Workflow (``payroll_modules.advances.workflows``).

Responsibility
--------------
Declares the salary-advance lifecycle.  ``AdvanceLedger`` consults this
declaration for every state change; a transition not listed here raises
``InvalidStateError``.

    pending --approve--> approved --repay--> repaid
    pending --reject---> rejected

``withdraw`` is only legal from ``pending`` and deletes the advance
instead of moving it to a new state.
"""

from payroll_kernel.domain.workflow import Guard, Transition, Workflow
from payroll_kernel.logging_config import get_logger

logger = get_logger("modules.advances.workflows")


BALANCE_FULLY_AMORTIZED = Guard(
    name="balance_fully_amortized",
    description="Remaining balance has reached zero",
)

WITHDRAWABLE_STATES = ("pending",)

SALARY_ADVANCE_WORKFLOW = Workflow(
    name="salary_advance",
    description="Salary advance request, decision and repayment",
    initial_state="pending",
    states=("pending", "approved", "rejected", "repaid"),
    transitions=(
        Transition("pending", "approved", action="approve"),
        Transition("pending", "rejected", action="reject"),
        Transition(
            "approved", "repaid", action="repay", guard=BALANCE_FULLY_AMORTIZED,
        ),
    ),
    terminal_states=("rejected", "repaid"),
)

logger.info(
    "advance_workflow_defined",
    extra={
        "workflow_name": SALARY_ADVANCE_WORKFLOW.name,
        "state_count": len(SALARY_ADVANCE_WORKFLOW.states),
        "transition_count": len(SALARY_ADVANCE_WORKFLOW.transitions),
    },
)
