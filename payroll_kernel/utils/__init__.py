"""Utility modules for the payroll kernel."""

from payroll_kernel.utils.idempotency import (
    generate_payroll_run_key,
    parse_payroll_run_key,
)
from payroll_kernel.utils.locks import EmployeeLockRegistry

__all__ = [
    "generate_payroll_run_key",
    "parse_payroll_run_key",
    "EmployeeLockRegistry",
]
