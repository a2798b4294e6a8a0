"""Salary advances: request, decision and amortization through payroll."""

from payroll_modules.advances.models import (
    ActiveDeduction,
    AdvanceStatus,
    SalaryAdvance,
)
from payroll_modules.advances.service import AdvanceLedger
from payroll_modules.advances.workflows import SALARY_ADVANCE_WORKFLOW

__all__ = [
    "ActiveDeduction",
    "AdvanceStatus",
    "SalaryAdvance",
    "AdvanceLedger",
    "SALARY_ADVANCE_WORKFLOW",
]
