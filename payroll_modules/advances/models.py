"""
Salary Advance Domain Models (``payroll_modules.advances.models``).

Responsibility
--------------
Frozen value objects for salary advances: the advance snapshot returned
by ``AdvanceLedger`` and the per-run deduction line computed from it.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  No I/O, no database.

Invariants enforced
-------------------
* All monetary fields are ``Decimal``.
* ``0 <= remaining_balance <= requested_amount``.
* ``remaining_balance == 0`` iff ``status is REPAID``.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from payroll_kernel.domain.values import EmployeeKind, EmployeeRef


class AdvanceStatus(str, Enum):
    """Advance lifecycle states.  Must align with ``SALARY_ADVANCE_WORKFLOW.states``."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REPAID = "repaid"


@dataclass(frozen=True)
class SalaryAdvance:
    """A snapshot of one salary advance."""
    id: UUID
    employee_id: UUID
    employee_kind: EmployeeKind
    requested_amount: Decimal
    request_date: date
    repayment_months: int
    remaining_balance: Decimal
    status: AdvanceStatus
    base_salary_at_request: Decimal
    reason_text: str | None = None
    approval_date: date | None = None
    decided_by_id: UUID | None = None

    def __post_init__(self):
        if self.remaining_balance < 0:
            raise ValueError("remaining_balance cannot be negative")
        if self.remaining_balance > self.requested_amount:
            raise ValueError("remaining_balance cannot exceed requested_amount")
        if (self.remaining_balance == 0) != (self.status is AdvanceStatus.REPAID):
            raise ValueError(
                f"status {self.status.value} inconsistent with remaining "
                f"balance {self.remaining_balance}"
            )

    @property
    def owner(self) -> EmployeeRef:
        return EmployeeRef(employee_id=self.employee_id, employee_kind=self.employee_kind)

    @property
    def amount_repaid(self) -> Decimal:
        return self.requested_amount - self.remaining_balance


@dataclass(frozen=True)
class ActiveDeduction:
    """One approved advance still being repaid, with this run's installment."""
    advance_id: UUID
    requested_amount: Decimal
    remaining_balance: Decimal
    repayment_months: int
    monthly_deduction: Decimal
    request_date: date

    @property
    def settles_advance(self) -> bool:
        """True when this installment clears the balance."""
        return self.monthly_deduction >= self.remaining_balance
