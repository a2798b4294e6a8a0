"""
Payroll Engine Invariants Contract.

These invariants are structural law. No configuration set may switch them
off. This module only declares them; enforcement is distributed across
the tax calculator, the advance ledger, the payroll runner, and the ORM
immutability listeners.
"""

from enum import Enum, unique


@unique
class PayrollInvariant(str, Enum):
    """Non-configurable invariants enforced by the engine."""

    WITHHOLDING_RECONCILIATION = "withholding_reconciliation"
    """ostie + cnaps + total_tax + net == gross for every tax result.
    Enforced by TaxCalculator using exact Decimal arithmetic."""

    MINIMUM_TAX = "minimum_tax"
    """total_tax is never below the configured minimum tax, including for
    non-positive taxable income. Enforced by TaxCalculator."""

    ADVANCE_CAP = "advance_cap"
    """An advance never exceeds the cap ratio of the base salary at request
    time. Enforced by AdvanceLedger.request."""

    BALANCE_MONOTONIC = "balance_monotonic"
    """remaining_balance never increases and never goes below zero.
    Enforced by AdvanceLedger and the advance before_update listener."""

    REPAID_IFF_ZERO = "repaid_iff_zero"
    """An advance is REPAID exactly when its remaining balance is zero."""

    PAYROLL_APPEND_ONLY = "payroll_append_only"
    """Payroll records are never updated or deleted. Enforced by the
    payroll record before_update/before_delete listeners."""

    AT_MOST_ONCE_RUN = "at_most_once_run"
    """At most one successful payroll run per (employee, period). Enforced
    by PayrollRunner locking and the idempotency-key unique constraint."""


ALL_PAYROLL_INVARIANTS: frozenset[PayrollInvariant] = frozenset(PayrollInvariant)

# The kernel package may not import from these packages.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "payroll_config",
    "payroll_engines",
    "payroll_modules",
)
