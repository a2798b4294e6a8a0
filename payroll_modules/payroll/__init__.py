"""Payroll runs: one append-only record per employee and pay period."""

from payroll_modules.payroll.models import (
    AdvanceLineItem,
    PayrollPreview,
    PayrollRecord,
)
from payroll_modules.payroll.selectors import PayrollHistorySelector
from payroll_modules.payroll.service import PayrollRunner

__all__ = [
    "AdvanceLineItem",
    "PayrollPreview",
    "PayrollRecord",
    "PayrollHistorySelector",
    "PayrollRunner",
]
