"""
ORM-level immutability enforcement (``payroll_modules.immutability``).

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database.  The listeners here check the persistence rules of payroll data
and raise ``ImmutabilityViolationError`` so the flush, and with it the
transaction, is aborted:

    session.flush()
         |
         v
    [before_update] --> _check_*_update() --> ImmutabilityViolationError
         |
    [before_delete] --> _check_*_delete() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Protected entities
------------------

Entity          | Rule
----------------|------------------------------------------------------------
PayrollRecord   | ALWAYS immutable, never deleted (append-only)
SalaryAdvance   | identity and request fields fixed; remaining balance never
                | increases nor goes negative; remaining == 0 iff repaid;
                | rejected/repaid rows frozen; only pending rows deleted

Usage::

    from payroll_modules.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup

Bulk ``UPDATE``/``DELETE`` statements bypass mapper events; services in
this package never issue them.
"""

from decimal import Decimal

from sqlalchemy import event, inspect
from sqlalchemy.orm.attributes import get_history

from payroll_kernel.exceptions import ImmutabilityViolationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("modules.immutability")

_AUDIT_FIELDS = frozenset({"updated_at", "updated_by_id"})

_ADVANCE_FIXED_FIELDS = (
    "employee_id",
    "employee_kind",
    "requested_amount",
    "request_date",
    "repayment_months",
    "base_salary_at_request",
    "created_by_id",
)

_ADVANCE_TERMINAL_STATES = ("rejected", "repaid")


def _blocked(entity_type: str, entity_id, operation: str, reason: str, field=None):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
            "field": field,
        },
    )
    return ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


# ---------------------------------------------------------------------------
# PayrollRecord
# ---------------------------------------------------------------------------


def _check_payroll_record_update(mapper, connection, target):
    """Any change to a persisted payroll record is rejected."""
    for attr in inspect(target).attrs:
        if attr.key in _AUDIT_FIELDS:
            continue
        if attr.history.has_changes():
            raise _blocked(
                "PayrollRecord",
                target.id,
                "UPDATE",
                f"Cannot modify field '{attr.key}' on a payroll record",
                field=attr.key,
            )


def _check_payroll_record_delete(mapper, connection, target):
    raise _blocked(
        "PayrollRecord",
        target.id,
        "DELETE",
        "Payroll records cannot be deleted",
    )


# ---------------------------------------------------------------------------
# SalaryAdvance
# ---------------------------------------------------------------------------


def _previous_value(target, key: str):
    history = get_history(target, key)
    if history.deleted:
        return history.deleted[0]
    return getattr(target, key)


def _check_salary_advance_update(mapper, connection, target):
    """Enforce the balance and lifecycle rules of a salary advance."""
    for key in _ADVANCE_FIXED_FIELDS:
        if get_history(target, key).deleted:
            raise _blocked(
                "SalaryAdvance",
                target.id,
                "UPDATE",
                f"Cannot modify field '{key}' of a salary advance",
                field=key,
            )

    old_status = _previous_value(target, "status")
    if old_status in _ADVANCE_TERMINAL_STATES:
        for attr in inspect(target).attrs:
            if attr.key not in _AUDIT_FIELDS and attr.history.has_changes():
                raise _blocked(
                    "SalaryAdvance",
                    target.id,
                    "UPDATE",
                    f"Advance in terminal status '{old_status}' cannot change",
                    field=attr.key,
                )

    old_balance = Decimal(_previous_value(target, "remaining_balance"))
    new_balance = Decimal(target.remaining_balance)
    if new_balance > old_balance:
        raise _blocked(
            "SalaryAdvance",
            target.id,
            "UPDATE",
            f"Remaining balance cannot increase ({old_balance} -> {new_balance})",
            field="remaining_balance",
        )
    if new_balance < 0:
        raise _blocked(
            "SalaryAdvance",
            target.id,
            "UPDATE",
            f"Remaining balance cannot be negative ({new_balance})",
            field="remaining_balance",
        )
    if (new_balance == 0) != (target.status == "repaid"):
        raise _blocked(
            "SalaryAdvance",
            target.id,
            "UPDATE",
            f"Status '{target.status}' inconsistent with remaining balance {new_balance}",
            field="status",
        )


def _check_salary_advance_delete(mapper, connection, target):
    """Only a pending advance may be removed (withdrawal)."""
    status = _previous_value(target, "status")
    if status != "pending":
        raise _blocked(
            "SalaryAdvance",
            target.id,
            "DELETE",
            f"Advance in status '{status}' cannot be deleted",
        )


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def _listeners():
    from payroll_modules.advances.orm import SalaryAdvanceModel
    from payroll_modules.payroll.orm import PayrollRecordModel

    return (
        (PayrollRecordModel, "before_update", _check_payroll_record_update),
        (PayrollRecordModel, "before_delete", _check_payroll_record_delete),
        (SalaryAdvanceModel, "before_update", _check_salary_advance_update),
        (SalaryAdvanceModel, "before_delete", _check_salary_advance_delete),
    )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Idempotent; call after the ORM models are imported and before any
    database operation.
    """
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the immutability listeners.

    WARNING: Only use this in tests that must bypass the rules on purpose.
    """
    for target, event_name, listener_fn in _listeners():
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)
