"""
IRSA Tax Engine - Convert a gross monthly salary into withholdings and tax.

Applies the mandatory social-insurance withholdings (OSTIE, CNAPS) and the
progressive IRSA income tax with its legal minimum.  Pure: no I/O, no
clock, no database.  The bracket table and rates come from configuration.

Arithmetic is exact ``Decimal`` throughout; nothing is rounded here.
Presentation rounding is the caller's concern.

Usage:
    from decimal import Decimal
    from payroll_config import get_active_config
    from payroll_engines.tax_calculator import TaxCalculator

    calculator = TaxCalculator.from_config(get_active_config())
    result = calculator.compute(Decimal("1000000"))
    print(result.total_tax)  # 101500.00
    print(result.net)        # 868500.00
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal

from payroll_config.schema import (
    ZERO,
    BracketTable,
    PayrollEngineConfig,
    WithholdingRates,
)
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.values import to_decimal
from payroll_kernel.exceptions import InvalidInputError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.tax_calculator")


@dataclass(frozen=True)
class BracketContribution:
    """Tax levied by one bracket on the slice of income inside it."""

    bracket_index: int  # 1-based
    rate: Decimal
    amount: Decimal


@dataclass(frozen=True)
class TaxResult:
    """
    Full withholding breakdown for one gross salary.

    Guarantees:
        - ostie + cnaps + total_tax + net == gross (exactly).
        - total_tax >= minimum tax of the table used.
        - sum(c.amount for c in bracket_contributions) == progressive_tax.
    """

    gross: Decimal
    ostie: Decimal
    cnaps: Decimal
    taxable_income: Decimal
    bracket_contributions: tuple[BracketContribution, ...]
    progressive_tax: Decimal
    total_tax: Decimal
    minimum_tax_applied: bool
    net: Decimal

    @property
    def social_contributions(self) -> Decimal:
        return self.ostie + self.cnaps

    @property
    def total_withholdings(self) -> Decimal:
        return self.social_contributions + self.total_tax

    @property
    def effective_tax_rate(self) -> Decimal:
        """IRSA as a fraction of gross."""
        return self.total_tax / self.gross


class TaxCalculator:
    """
    Compute OSTIE, CNAPS and IRSA for a gross monthly salary.

    Pure functions - no I/O, no database access.
    Bracket table and rates provided at construction.
    """

    def __init__(
        self,
        brackets: BracketTable,
        withholdings: WithholdingRates | None = None,
    ):
        self._brackets = brackets
        self._withholdings = withholdings or WithholdingRates()

    @classmethod
    def from_config(cls, config: PayrollEngineConfig) -> TaxCalculator:
        return cls(brackets=config.brackets, withholdings=config.withholdings)

    @property
    def brackets(self) -> BracketTable:
        return self._brackets

    @property
    def withholdings(self) -> WithholdingRates:
        return self._withholdings

    @traced_engine("irsa_tax", "1.0", fingerprint_fields=("gross",))
    def compute(self, gross: Decimal) -> TaxResult:
        """
        Compute the withholding breakdown for ``gross``.

        Args:
            gross: Monthly gross salary (Decimal, int or numeric string).

        Returns:
            TaxResult with every intermediate amount.

        Raises:
            InvalidInputError: If gross is not a finite number or is <= 0.
        """
        t0 = time.monotonic()
        gross = to_decimal(gross, "gross")
        if gross <= ZERO:
            raise InvalidInputError("gross", gross, "must be positive")

        ostie = gross * self._withholdings.ostie_rate
        cnaps = gross * self._withholdings.cnaps_rate
        taxable = gross - ostie - cnaps

        contributions = self.bracket_contributions(taxable)
        progressive_tax = self.progressive_tax(taxable)

        minimum_tax = self._brackets.minimum_tax
        minimum_applied = progressive_tax < minimum_tax
        total_tax = minimum_tax if minimum_applied else progressive_tax

        result = TaxResult(
            gross=gross,
            ostie=ostie,
            cnaps=cnaps,
            taxable_income=taxable,
            bracket_contributions=contributions,
            progressive_tax=progressive_tax,
            total_tax=total_tax,
            minimum_tax_applied=minimum_applied,
            net=gross - ostie - cnaps - total_tax,
        )

        logger.debug("irsa_computed", extra={
            "gross": str(gross),
            "taxable_income": str(taxable),
            "progressive_tax": str(progressive_tax),
            "total_tax": str(total_tax),
            "minimum_tax_applied": minimum_applied,
            "net": str(result.net),
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        })
        return result

    def progressive_tax(self, taxable_income: Decimal) -> Decimal:
        """Tax before the minimum, from the single bracket holding the income."""
        index = self._brackets.locate(taxable_income)
        if index is None:
            return ZERO
        return self._brackets.brackets[index].tax_at(taxable_income)

    def bracket_contributions(
        self, taxable_income: Decimal
    ) -> tuple[BracketContribution, ...]:
        """Non-zero per-bracket tax slices, lowest bracket first."""
        contributions: list[BracketContribution] = []
        for index, bracket in enumerate(self._brackets.brackets, 1):
            if taxable_income <= bracket.floor:
                break
            amount = bracket.contribution(taxable_income)
            if amount > ZERO:
                contributions.append(
                    BracketContribution(
                        bracket_index=index, rate=bracket.rate, amount=amount
                    )
                )
        return tuple(contributions)
