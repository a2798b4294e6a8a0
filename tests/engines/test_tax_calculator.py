"""
Tests for the IRSA tax engine.

Covers:
- Withholdings and IRSA for reference salaries
- Minimum tax floor
- Bracket boundaries and contributions
- Reconciliation property over a range of salaries
- Input validation
"""

from decimal import Decimal

import pytest

from payroll_config.schema import PayrollEngineConfig, WithholdingRates
from payroll_engines.tax_calculator import BracketContribution, TaxCalculator
from payroll_kernel.exceptions import InvalidInputError


@pytest.fixture
def calculator() -> TaxCalculator:
    return TaxCalculator.from_config(PayrollEngineConfig.default())


class TestReferenceSalaries:

    def test_one_million(self, calculator):
        result = calculator.compute(Decimal("1000000"))

        assert result.ostie == Decimal("20000")
        assert result.cnaps == Decimal("10000")
        assert result.taxable_income == Decimal("970000")
        assert result.progressive_tax == Decimal("101500")
        assert result.total_tax == Decimal("101500")
        assert result.minimum_tax_applied is False
        assert result.net == Decimal("868500")

    def test_one_million_summary_figures(self, calculator):
        result = calculator.compute(Decimal("1000000"))

        assert result.social_contributions == Decimal("30000")
        assert result.total_withholdings == Decimal("131500")
        assert result.effective_tax_rate == Decimal("0.1015")

    def test_one_million_contributions(self, calculator):
        result = calculator.compute(Decimal("1000000"))

        assert result.bracket_contributions == (
            BracketContribution(2, Decimal("0.05"), Decimal("2500")),
            BracketContribution(3, Decimal("0.10"), Decimal("10000")),
            BracketContribution(4, Decimal("0.15"), Decimal("15000")),
            BracketContribution(5, Decimal("0.20"), Decimal("74000")),
        )

    def test_three_hundred_thousand_pays_minimum(self, calculator):
        result = calculator.compute(Decimal("300000"))

        assert result.taxable_income == Decimal("291000")
        assert result.progressive_tax == Decimal("0")
        assert result.total_tax == Decimal("3000")
        assert result.minimum_tax_applied is True
        assert result.bracket_contributions == ()
        assert result.net == Decimal("288000")

    def test_five_hundred_thousand(self, calculator):
        # taxable 485 000 -> bracket 3: 2 500 + 10% x 85 000
        result = calculator.compute(Decimal("500000"))

        assert result.taxable_income == Decimal("485000")
        assert result.total_tax == Decimal("11000")
        assert result.net == Decimal("474000")

    def test_accepts_integer_and_string(self, calculator):
        assert calculator.compute(1000000).net == Decimal("868500")
        assert calculator.compute("1000000").net == Decimal("868500")


class TestBracketBoundaries:

    @pytest.mark.parametrize(
        "taxable,expected",
        [
            ("350000", "0"),
            ("350001", "0.05"),
            ("400000", "2500"),
            ("500000", "12500"),
            ("600000", "27500"),
            ("600010", "27502"),
        ],
    )
    def test_progressive_tax_at_boundaries(self, calculator, taxable, expected):
        assert calculator.progressive_tax(Decimal(taxable)) == Decimal(expected)

    def test_zero_income_is_untaxed(self, calculator):
        assert calculator.progressive_tax(Decimal("0")) == Decimal("0")
        assert calculator.bracket_contributions(Decimal("0")) == ()

    def test_minimum_tax_when_progressive_just_below(self, calculator):
        # taxable 400 000 -> progressive 2 500 < 3 000
        gross = Decimal("400000") / Decimal("0.97")
        result = calculator.compute(gross)
        assert result.minimum_tax_applied is True
        assert result.total_tax == Decimal("3000")


class TestProperties:

    @pytest.mark.parametrize(
        "gross",
        ["1", "0.01", "12345.67", "300000", "360824.74", "412371.13",
         "515463.92", "618556.70", "999999.99", "25000000"],
    )
    def test_withholdings_reconcile_to_gross(self, calculator, gross):
        result = calculator.compute(Decimal(gross))

        assert result.ostie + result.cnaps + result.total_tax + result.net == result.gross
        assert result.total_withholdings + result.net == result.gross
        assert result.total_tax >= Decimal("3000")

    @pytest.mark.parametrize("gross", ["300000", "420000", "700000", "2500000"])
    def test_contributions_sum_to_progressive_tax(self, calculator, gross):
        result = calculator.compute(Decimal(gross))

        assert all(c.amount > 0 for c in result.bracket_contributions)
        assert sum((c.amount for c in result.bracket_contributions), Decimal("0")) == (
            result.progressive_tax
        )
        indexes = [c.bracket_index for c in result.bracket_contributions]
        assert indexes == sorted(indexes)

    def test_no_rounding(self, calculator):
        result = calculator.compute(Decimal("123456.789"))
        assert result.ostie == Decimal("2469.13578")


class TestValidation:

    @pytest.mark.parametrize("gross", [Decimal("0"), Decimal("-1"), "-500"])
    def test_non_positive_gross_rejected(self, calculator, gross):
        with pytest.raises(InvalidInputError) as exc_info:
            calculator.compute(gross)
        assert exc_info.value.field == "gross"

    @pytest.mark.parametrize("gross", [1000.0, "abc", Decimal("NaN"), Decimal("Infinity")])
    def test_non_numeric_gross_rejected(self, calculator, gross):
        with pytest.raises(InvalidInputError):
            calculator.compute(gross)


class TestConfiguration:

    def test_custom_withholding_rates(self):
        config = PayrollEngineConfig.default()
        calculator = TaxCalculator(
            config.brackets,
            WithholdingRates(ostie_rate=Decimal("0"), cnaps_rate=Decimal("0")),
        )
        result = calculator.compute(Decimal("1000000"))
        assert result.taxable_income == Decimal("1000000")
        assert result.total_tax == Decimal("107500")

    def test_trace_emitted(self, calculator, captured_logs):
        calculator.compute(Decimal("1000000"))

        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "irsa_tax"
        assert len(traces[0]["input_fingerprint"]) == 16
