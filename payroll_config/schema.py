"""
Configuration Schema (``payroll_config.schema``).

Responsibility
--------------
Frozen dataclasses describing the statutory payroll parameters: the IRSA
bracket table with its minimum tax, the OSTIE/CNAPS withholding rates, the
salary-advance policy and the payroll-run policy.

Architecture position
---------------------
**Config layer** -- pure data.  Imports nothing from engines or modules.

Invariants enforced
-------------------
* Brackets start at 0, are contiguous, strictly increasing, and only the
  last one is open-ended.
* ``base_amount`` of every bracket equals the cumulative tax owed at its
  floor, so the tax for any income is found from one bracket alone.
* All rates lie in ``[0, 1]``; all amounts are ``Decimal``.

Failure modes
-------------
* Any violated invariant raises ``ValueError`` at construction.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field
from decimal import Decimal

ZERO = Decimal("0")
ONE = Decimal("1")


@dataclass(frozen=True)
class TaxBracket:
    """One progressive band: ``floor < income <= ceiling`` taxed at ``rate``."""

    floor: Decimal
    ceiling: Decimal | None
    rate: Decimal
    base_amount: Decimal

    def __post_init__(self) -> None:
        if self.floor < ZERO:
            raise ValueError(f"bracket floor cannot be negative: {self.floor}")
        if self.ceiling is not None and self.ceiling <= self.floor:
            raise ValueError(
                f"bracket ceiling {self.ceiling} must exceed floor {self.floor}"
            )
        if not ZERO <= self.rate <= ONE:
            raise ValueError(f"bracket rate must be between 0 and 1, got {self.rate}")
        if self.base_amount < ZERO:
            raise ValueError(f"bracket base amount cannot be negative: {self.base_amount}")

    @property
    def is_open_ended(self) -> bool:
        return self.ceiling is None

    def contains(self, income: Decimal) -> bool:
        return income > self.floor and (self.ceiling is None or income <= self.ceiling)

    def contribution(self, income: Decimal) -> Decimal:
        """Marginal tax this band levies on ``income``."""
        if income <= self.floor:
            return ZERO
        upper = income if self.ceiling is None else min(income, self.ceiling)
        return self.rate * (upper - self.floor)

    def tax_at(self, income: Decimal) -> Decimal:
        """Total progressive tax for an income that falls in this band."""
        return self.base_amount + self.rate * (income - self.floor)


@dataclass(frozen=True)
class BracketTable:
    """Ordered IRSA bands plus the legal minimum tax."""

    brackets: tuple[TaxBracket, ...]
    minimum_tax: Decimal = ZERO

    def __post_init__(self) -> None:
        if not self.brackets:
            raise ValueError("bracket table needs at least one bracket")
        if self.minimum_tax < ZERO:
            raise ValueError("minimum_tax cannot be negative")

        first = self.brackets[0]
        if first.floor != ZERO:
            raise ValueError(f"first bracket must start at 0, got {first.floor}")
        if first.base_amount != ZERO:
            raise ValueError("first bracket base amount must be 0")

        for index, (lower, upper) in enumerate(zip(self.brackets, self.brackets[1:]), 1):
            if lower.ceiling is None:
                raise ValueError(f"only the last bracket may be open-ended (bracket {index})")
            if upper.floor != lower.ceiling:
                raise ValueError(
                    f"brackets {index} and {index + 1} are not contiguous: "
                    f"{lower.ceiling} != {upper.floor}"
                )
            expected = lower.base_amount + lower.rate * (lower.ceiling - lower.floor)
            if upper.base_amount != expected:
                raise ValueError(
                    f"bracket {index + 1} base amount {upper.base_amount} does not "
                    f"match cumulative tax {expected} at its floor"
                )

        if not self.brackets[-1].is_open_ended:
            raise ValueError("last bracket must be open-ended (no ceiling)")

    @property
    def floors(self) -> tuple[Decimal, ...]:
        return tuple(b.floor for b in self.brackets)

    def locate(self, income: Decimal) -> int | None:
        """
        0-based index of the bracket containing ``income``.

        Returns None for ``income <= 0`` (no band applies).
        """
        index = bisect_left(self.floors, income) - 1
        return index if index >= 0 else None

    def __len__(self) -> int:
        return len(self.brackets)


@dataclass(frozen=True)
class WithholdingRates:
    """Fixed-rate mandatory social-insurance withholdings."""

    ostie_rate: Decimal = Decimal("0.02")
    cnaps_rate: Decimal = Decimal("0.01")

    def __post_init__(self) -> None:
        for name in ("ostie_rate", "cnaps_rate"):
            value = getattr(self, name)
            if not ZERO <= value <= ONE:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if self.ostie_rate + self.cnaps_rate >= ONE:
            raise ValueError("combined withholding rates must stay below 100%")


@dataclass(frozen=True)
class AdvancePolicy:
    """Rules for salary-advance requests and their amortization."""

    cap_ratio: Decimal = Decimal("0.5")
    allowed_repayment_months: tuple[int, ...] = (1, 2, 3)
    installment_quantum: Decimal = Decimal("0.01")

    def __post_init__(self) -> None:
        if not ZERO < self.cap_ratio <= ONE:
            raise ValueError(f"cap_ratio must be in (0, 1], got {self.cap_ratio}")
        if not self.allowed_repayment_months:
            raise ValueError("allowed_repayment_months cannot be empty")
        if any(m <= 0 for m in self.allowed_repayment_months):
            raise ValueError("repayment months must be positive")
        if self.installment_quantum <= ZERO:
            raise ValueError("installment_quantum must be positive")


@dataclass(frozen=True)
class RunPolicy:
    """Rules for payroll runs."""

    lock_timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        if self.lock_timeout_seconds <= 0:
            raise ValueError("lock_timeout_seconds must be positive")


def _madagascar_2025_brackets() -> BracketTable:
    return BracketTable(
        brackets=(
            TaxBracket(Decimal("0"), Decimal("350000"), Decimal("0"), Decimal("0")),
            TaxBracket(Decimal("350000"), Decimal("400000"), Decimal("0.05"), Decimal("0")),
            TaxBracket(Decimal("400000"), Decimal("500000"), Decimal("0.10"), Decimal("2500")),
            TaxBracket(Decimal("500000"), Decimal("600000"), Decimal("0.15"), Decimal("12500")),
            TaxBracket(Decimal("600000"), None, Decimal("0.20"), Decimal("27500")),
        ),
        minimum_tax=Decimal("3000"),
    )


@dataclass(frozen=True)
class PayrollEngineConfig:
    """The complete, immutable configuration of the payroll engine."""

    config_id: str
    version: int
    jurisdiction: str
    currency: str
    brackets: BracketTable
    withholdings: WithholdingRates = field(default_factory=WithholdingRates)
    advances: AdvancePolicy = field(default_factory=AdvancePolicy)
    runs: RunPolicy = field(default_factory=RunPolicy)
    checksum: str = ""

    @classmethod
    def default(cls) -> PayrollEngineConfig:
        """Madagascar IRSA 2025 values, identical to the shipped YAML set."""
        return cls(
            config_id="MG-IRSA-2025",
            version=1,
            jurisdiction="MG",
            currency="MGA",
            brackets=_madagascar_2025_brackets(),
        )
