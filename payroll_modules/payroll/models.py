"""
Payroll Domain Models (``payroll_modules.payroll.models``).

Responsibility
--------------
Frozen value objects for payroll runs: the append-only ``PayrollRecord``
snapshot, and the ``PayrollPreview`` shown on the payroll screen before a
run is confirmed.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  No I/O, no database.

Invariants enforced
-------------------
* ``net_salary == gross - ostie - cnaps - tax - advance_deduction``.
* ``negative_net`` is True iff ``net_salary < 0``.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from payroll_engines.tax_calculator import TaxResult
from payroll_kernel.domain.values import EmployeeKind, EmployeeRef


@dataclass(frozen=True)
class PayrollRecord:
    """The result of one successful payroll run for one employee and period."""
    id: UUID
    employee_id: UUID
    employee_kind: EmployeeKind
    period: str
    gross_salary: Decimal
    ostie_amount: Decimal
    cnaps_amount: Decimal
    taxable_income: Decimal
    tax_amount: Decimal
    minimum_tax_applied: bool
    advance_deduction: Decimal
    net_salary: Decimal
    negative_net: bool
    run_timestamp: datetime
    idempotency_key: str
    created_by_id: UUID | None = None

    def __post_init__(self):
        expected = (
            self.gross_salary
            - self.ostie_amount
            - self.cnaps_amount
            - self.tax_amount
            - self.advance_deduction
        )
        if self.net_salary != expected:
            raise ValueError(
                f"net_salary {self.net_salary} does not reconcile to {expected}"
            )
        if self.negative_net != (self.net_salary < 0):
            raise ValueError("negative_net flag inconsistent with net_salary")

    @property
    def owner(self) -> EmployeeRef:
        return EmployeeRef(employee_id=self.employee_id, employee_kind=self.employee_kind)

    @property
    def net_before_advances(self) -> Decimal:
        return self.net_salary + self.advance_deduction


@dataclass(frozen=True)
class AdvanceLineItem:
    """One advance installment shown on the payroll screen."""
    advance_id: UUID
    remaining_before: Decimal
    deduction: Decimal
    settles_advance: bool = False

    @property
    def remaining_after(self) -> Decimal:
        return max(self.remaining_before - self.deduction, Decimal("0"))


@dataclass(frozen=True)
class PayrollPreview:
    """What a run would record, computed without touching the database."""
    employee_id: UUID
    employee_kind: EmployeeKind
    period: str
    tax: TaxResult
    advance_lines: tuple[AdvanceLineItem, ...]
    already_recorded: bool = False
    existing_record_id: UUID | None = None

    @property
    def total_deduction(self) -> Decimal:
        return sum((line.deduction for line in self.advance_lines), Decimal("0"))

    @property
    def net_salary(self) -> Decimal:
        return self.tax.net - self.total_deduction

    @property
    def is_negative_net(self) -> bool:
        return self.net_salary < 0
