"""
Pure domain layer.

Immutable value objects with NO dependencies on the ORM, the database
or I/O. Time enters only through an injected Clock.
"""

from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.values import (
    Employee,
    EmployeeKind,
    EmployeeRef,
    PayPeriod,
    to_decimal,
    to_employee_kind,
)
from payroll_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Employee",
    "EmployeeKind",
    "EmployeeRef",
    "PayPeriod",
    "to_decimal",
    "to_employee_kind",
    "Guard",
    "Transition",
    "Workflow",
]
