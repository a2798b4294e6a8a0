"""Selectors for the payroll engine (read side)."""

from payroll_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
