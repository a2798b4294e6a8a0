"""
Idempotency key generation utilities.

A payroll run is keyed by employee and pay period so the same month can
never be processed twice for the same employee, even under retries or two
operators clicking at once.
"""

from uuid import UUID

_PREFIX = "payroll"


def generate_payroll_run_key(
    employee_kind: str,
    employee_id: UUID | str,
    period: str,
) -> str:
    """
    Generate the idempotency key of a payroll run.

    Format: payroll:employee_kind:employee_id:period

    The key is stored on the PayrollRecord and has a unique constraint.

    Example:
        >>> generate_payroll_run_key("teacher", uuid, "2025-03")
        "payroll:teacher:550e8400-e29b-41d4-a716-446655440000:2025-03"
    """
    kind = getattr(employee_kind, "value", employee_kind)
    return f"{_PREFIX}:{kind}:{employee_id}:{period}"


def parse_payroll_run_key(key: str) -> tuple[str, str, str]:
    """
    Parse a payroll run key into (employee_kind, employee_id, period).

    Raises:
        ValueError: If key format is invalid.
    """
    parts = key.split(":")
    if len(parts) != 4 or parts[0] != _PREFIX:
        raise ValueError(f"Invalid payroll run key format: {key}")
    return parts[1], parts[2], parts[3]
