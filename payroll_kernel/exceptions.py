"""
Typed Exception Hierarchy for the Payroll Engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll screens must react differently to a rejected advance request, a
decision on an advance that was already decided, and a payroll period that
was already processed. Parsing message strings to tell them apart is
fragile, so every error:

  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (not just a message string)

Example:
    try:
        ledger.request(...)
    except LimitExceededError as e:
        show_error(code=e.code, limit=e.limit, requested=e.amount)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollEngineError (base)
    |
    +-- InvalidInputError
    +-- LimitExceededError
    +-- InvalidStateError
    +-- AdvanceNotFoundError
    +-- NegativeNetSalaryError
    |
    +-- ConcurrencyError
    |   +-- ConcurrencyConflictError
    |   +-- PayrollAlreadyRecordedError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                        | When Raised
----------------------------|-------------------------------------------------
INVALID_INPUT               | Non-positive amount, repayment term not 1-3,
                            | malformed pay period
ADVANCE_LIMIT_EXCEEDED      | Advance above the cap (50% of base salary)
INVALID_STATE               | Decision on a non-pending advance, deduction on
                            | a non-approved advance, withdrawal after decision
ADVANCE_NOT_FOUND           | Advance ID doesn't exist
NEGATIVE_NET_SALARY         | Net pay after advance deductions is below zero
CONCURRENCY_CONFLICT        | Two runs raced for the same employee/period
PAYROLL_ALREADY_RECORDED    | Period already processed for that employee
IMMUTABILITY_VIOLATION      | Update/delete of a payroll record, balance
                            | increase, or delete of a decided advance

===============================================================================
HANDLING PATTERNS
===============================================================================

1. ALREADY RECORDED IS NOT A FAILURE OF THE LEDGER:

    try:
        record = runner.run(employee, period, actor_id=actor)
    except PayrollAlreadyRecordedError as e:
        record = history.get(e.record_id)

2. NEGATIVE NET IS ADVISORY:

    except NegativeNetSalaryError as e:
        if operator_confirms(e.net_salary):
            runner.run(employee, period, actor_id=actor, allow_negative_net=True)

3. CONCURRENCY CONFLICTS ARE SURFACED, NEVER RETRIED HERE:

    except ConcurrencyConflictError:
        ask_operator_to_refresh()
"""


class PayrollEngineError(Exception):
    """
    Base exception for all payroll engine errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_ENGINE_ERROR"


class InvalidInputError(PayrollEngineError):
    """An argument is outside its valid domain."""

    code: str = "INVALID_INPUT"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = str(value)
        self.reason = reason
        super().__init__(f"Invalid {field} '{value}': {reason}")


class LimitExceededError(PayrollEngineError):
    """Requested advance exceeds the allowed share of the base salary."""

    code: str = "ADVANCE_LIMIT_EXCEEDED"

    def __init__(self, employee_id: str, amount: str, limit: str):
        self.employee_id = employee_id
        self.amount = amount
        self.limit = limit
        super().__init__(
            f"Advance of {amount} for employee {employee_id} exceeds limit {limit}"
        )


class InvalidStateError(PayrollEngineError):
    """Operation is not allowed in the entity's current lifecycle state."""

    code: str = "INVALID_STATE"

    def __init__(self, entity_type: str, entity_id: str, status: str, action: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} {entity_type} {entity_id} in status '{status}'"
        )


class AdvanceNotFoundError(PayrollEngineError):
    """Salary advance with given ID was not found."""

    code: str = "ADVANCE_NOT_FOUND"

    def __init__(self, advance_id: str):
        self.advance_id = advance_id
        super().__init__(f"Salary advance not found: {advance_id}")


class NegativeNetSalaryError(PayrollEngineError):
    """
    Net salary after advance deductions would be negative.

    Advisory: the computed values travel with the exception so the caller
    can warn and re-run with ``allow_negative_net=True`` or block.
    """

    code: str = "NEGATIVE_NET_SALARY"

    def __init__(
        self,
        employee_id: str,
        period: str,
        net_salary: str,
        advance_deduction: str,
    ):
        self.employee_id = employee_id
        self.period = period
        self.net_salary = net_salary
        self.advance_deduction = advance_deduction
        super().__init__(
            f"Net salary for employee {employee_id} in {period} would be "
            f"{net_salary} after advance deductions of {advance_deduction}"
        )


# Concurrency-related exceptions


class ConcurrencyError(PayrollEngineError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class ConcurrencyConflictError(ConcurrencyError):
    """Two callers raced for the same employee and period."""

    code: str = "CONCURRENCY_CONFLICT"

    def __init__(self, employee_id: str, period: str, reason: str):
        self.employee_id = employee_id
        self.period = period
        self.reason = reason
        super().__init__(
            f"Concurrent payroll run for employee {employee_id} in {period}: {reason}"
        )


class PayrollAlreadyRecordedError(ConcurrencyError):
    """The period was already processed for this employee (at-most-once)."""

    code: str = "PAYROLL_ALREADY_RECORDED"

    def __init__(self, employee_id: str, period: str, record_id: str):
        self.employee_id = employee_id
        self.period = period
        self.record_id = record_id
        super().__init__(
            f"Payroll for employee {employee_id} in {period} already "
            f"recorded as {record_id}"
        )


# Immutability-related exceptions


class ImmutabilityError(PayrollEngineError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an append-only record.

    Payroll records are never edited; corrections are new records.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
