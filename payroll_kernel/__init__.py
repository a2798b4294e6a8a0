"""
Payroll Kernel

The shared foundation of the school payroll engine:
- Typed, code-carrying exceptions
- Structured JSON logging
- Append-only persistence for payroll records
- Injectable clocks and per-employee locks for at-most-once payroll runs
"""

__version__ = "0.1.0"
