"""Tests for employee and pay-period value objects."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_kernel.domain.values import (
    Employee,
    EmployeeKind,
    PayPeriod,
    to_decimal,
    to_employee_kind,
)
from payroll_kernel.exceptions import InvalidInputError


class TestToDecimal:

    @pytest.mark.parametrize(
        "value,expected",
        [("10.50", Decimal("10.5")), (10, Decimal("10")), (Decimal("10.5"), Decimal("10.5"))],
    )
    def test_accepts_exact_inputs(self, value, expected):
        assert to_decimal(value, "amount") == expected

    def test_rejects_float(self):
        with pytest.raises(InvalidInputError) as exc_info:
            to_decimal(10.5, "amount")
        assert exc_info.value.field == "amount"

    @pytest.mark.parametrize("value", ["ten", "", Decimal("NaN"), "Infinity"])
    def test_rejects_non_finite_or_garbage(self, value):
        with pytest.raises(InvalidInputError):
            to_decimal(value, "amount")


class TestToEmployeeKind:

    def test_accepts_value_and_member(self):
        assert to_employee_kind("teacher") is EmployeeKind.TEACHER
        assert to_employee_kind(EmployeeKind.STAFF) is EmployeeKind.STAFF

    def test_rejects_unknown_kind(self):
        with pytest.raises(InvalidInputError) as exc_info:
            to_employee_kind("contractor")
        assert exc_info.value.field == "employee_kind"


class TestEmployee:

    def test_coerces_kind_and_salary(self):
        employee = Employee(id=uuid4(), kind="staff", base_salary="450000")
        assert employee.kind is EmployeeKind.STAFF
        assert employee.base_salary == Decimal("450000")

    @pytest.mark.parametrize("salary", ["0", "-1"])
    def test_salary_must_be_positive(self, salary):
        with pytest.raises(InvalidInputError):
            Employee(id=uuid4(), kind=EmployeeKind.TEACHER, base_salary=Decimal(salary))

    def test_unknown_kind_is_invalid_input(self):
        with pytest.raises(InvalidInputError) as exc_info:
            Employee(id=uuid4(), kind="contractor", base_salary=Decimal("450000"))
        assert exc_info.value.field == "kind"

    def test_ref(self):
        employee_id = uuid4()
        employee = Employee(id=employee_id, kind=EmployeeKind.TEACHER, base_salary=Decimal("1"))
        assert str(employee.ref) == f"teacher:{employee_id}"


class TestPayPeriod:

    def test_parse_and_code(self):
        period = PayPeriod.parse("2025-03")
        assert (period.year, period.month) == (2025, 3)
        assert period.code == "2025-03"
        assert str(period) == "2025-03"

    def test_parse_passthrough(self):
        period = PayPeriod(2025, 3)
        assert PayPeriod.parse(period) is period

    def test_of_date(self):
        assert PayPeriod.of(date(2025, 12, 31)) == PayPeriod(2025, 12)

    def test_ordering(self):
        assert PayPeriod(2024, 12) < PayPeriod(2025, 1) < PayPeriod(2025, 2)

    @pytest.mark.parametrize("code", ["2025-13", "2025-00", "2025-3", "25-03", "March 2025"])
    def test_invalid_codes(self, code):
        with pytest.raises(InvalidInputError):
            PayPeriod.parse(code)
