"""
Advance amortization - pure installment arithmetic.

A salary advance is repaid in equal monthly installments deducted from
payroll.  The installment is flat: ``requested_amount / repayment_months``
rounded UP to the configured quantum, independent of the remaining
balance.  Applying an installment clamps the balance at zero, so the last
one may forgive the rounding excess.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_kernel.db.types import round_up_to_quantum

ZERO = Decimal("0")
DEFAULT_QUANTUM = Decimal("0.01")


@dataclass(frozen=True)
class InstallmentOutcome:
    """Result of applying one installment to an outstanding balance."""

    applied: Decimal
    remaining: Decimal

    @property
    def is_settled(self) -> bool:
        return self.remaining == ZERO


def monthly_installment(
    requested_amount: Decimal,
    repayment_months: int,
    quantum: Decimal = DEFAULT_QUANTUM,
) -> Decimal:
    """
    Scheduled deduction per payroll run.

    Raises:
        ValueError: If repayment_months is not positive or amount is negative.
    """
    if repayment_months <= 0:
        raise ValueError(f"repayment_months must be positive, got {repayment_months}")
    if requested_amount < ZERO:
        raise ValueError(f"requested_amount cannot be negative: {requested_amount}")
    return round_up_to_quantum(requested_amount / repayment_months, quantum)


def apply_installment(remaining_balance: Decimal, amount: Decimal) -> InstallmentOutcome:
    """
    Reduce ``remaining_balance`` by ``amount``, clamped at zero.

    Raises:
        ValueError: If amount is not positive.
    """
    if amount <= ZERO:
        raise ValueError(f"installment must be positive, got {amount}")
    applied = min(amount, remaining_balance)
    return InstallmentOutcome(applied=applied, remaining=remaining_balance - applied)
