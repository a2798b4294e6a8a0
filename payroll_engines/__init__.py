"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the pure calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import payroll_kernel (domain, exceptions, logging) and
    payroll_config schema types.  MUST NOT import payroll_modules.

Invariants enforced:
    - Engines never read the clock.
    - Decimal-only arithmetic; floats are rejected at the boundary.
    - Identical inputs always produce identical outputs.

Audit relevance:
    Every tax computation is traced via ``@traced_engine`` (see
    ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records.

Usage:
    from payroll_engines.tax_calculator import TaxCalculator
    from payroll_engines.amortization import monthly_installment
"""

from payroll_engines.amortization import (
    InstallmentOutcome,
    apply_installment,
    monthly_installment,
)
from payroll_engines.tax_calculator import (
    BracketContribution,
    TaxCalculator,
    TaxResult,
)
from payroll_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "InstallmentOutcome",
    "apply_installment",
    "monthly_installment",
    "BracketContribution",
    "TaxCalculator",
    "TaxResult",
    "compute_input_fingerprint",
    "traced_engine",
]
