"""
Employee and pay-period value objects (``payroll_kernel.domain.values``).

Responsibility:
    The read-only employee reference consumed from the staff/teacher CRUD
    layer, and the monthly pay period used as the at-most-once key.

Architecture position:
    Kernel > Domain -- pure, immutable, zero I/O.

Invariants enforced:
    - ``Employee.base_salary`` is a positive Decimal.
    - ``PayPeriod`` is a calendar month; its canonical code is "YYYY-MM".

Failure modes:
    - InvalidInputError on a non-positive base salary or malformed period.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import UUID

from payroll_kernel.exceptions import InvalidInputError

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


class EmployeeKind(str, Enum):
    """Which employee table the record comes from."""

    TEACHER = "teacher"
    STAFF = "staff"


def to_employee_kind(value: object, field: str = "employee_kind") -> EmployeeKind:
    """Coerce ``value`` to an ``EmployeeKind``."""
    try:
        return EmployeeKind(value)
    except ValueError:
        raise InvalidInputError(field, value, "expected 'teacher' or 'staff'") from None


def to_decimal(value: object, field: str) -> Decimal:
    """Coerce ``value`` to a finite Decimal, never through float."""
    if isinstance(value, float):
        raise InvalidInputError(field, value, "floats are not accepted for money")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(field, value, "not a decimal number") from None
    if not result.is_finite():
        raise InvalidInputError(field, value, "must be finite")
    return result


@dataclass(frozen=True)
class EmployeeRef:
    """Owner reference of an advance or payroll record."""

    employee_id: UUID
    employee_kind: EmployeeKind

    def __str__(self) -> str:
        return f"{self.employee_kind.value}:{self.employee_id}"


@dataclass(frozen=True)
class Employee:
    """An employee as seen by payroll: identity, kind and monthly base salary."""

    id: UUID
    kind: EmployeeKind
    base_salary: Decimal
    matricule: str | None = None
    full_name: str | None = None

    def __post_init__(self):
        salary = to_decimal(self.base_salary, "base_salary")
        if salary <= 0:
            raise InvalidInputError("base_salary", salary, "must be positive")
        object.__setattr__(self, "base_salary", salary)
        object.__setattr__(self, "kind", to_employee_kind(self.kind, "kind"))

    @property
    def ref(self) -> EmployeeRef:
        return EmployeeRef(employee_id=self.id, employee_kind=self.kind)


@dataclass(frozen=True, order=True)
class PayPeriod:
    """A monthly pay period."""

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise InvalidInputError("period", self.code, "month must be 01-12")
        if not 1900 <= self.year <= 9999:
            raise InvalidInputError("period", self.code, "year out of range")

    @property
    def code(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @classmethod
    def parse(cls, value: "str | PayPeriod") -> "PayPeriod":
        """Parse a "YYYY-MM" code."""
        if isinstance(value, PayPeriod):
            return value
        match = _PERIOD_RE.match(str(value).strip())
        if match is None:
            raise InvalidInputError("period", value, "expected YYYY-MM")
        return cls(year=int(match.group(1)), month=int(match.group(2)))

    @classmethod
    def of(cls, day: date) -> "PayPeriod":
        """The pay period containing ``day``."""
        return cls(year=day.year, month=day.month)

    def __str__(self) -> str:
        return self.code
