"""
Payroll Runner (``payroll_modules.payroll.service``).

Responsibility
--------------
Runs payroll for one employee and one pay period: computes withholdings
and IRSA, deducts the scheduled installment of every active salary
advance, and appends the resulting ``PayrollRecord``.

Architecture position
---------------------
**Modules layer** -- ``PayrollRunner`` is the sole public entry point for
payroll runs.  Tax computation is delegated to
``payroll_engines.tax_calculator``; advance amortization to
``AdvanceLedger`` constructed with ``auto_commit=False`` so every write of
a run shares one transaction.

Invariants enforced
-------------------
* At most one successful run per (employee, period): an in-process
  per-employee lock, a check for an existing record, and the unique
  ``idempotency_key`` constraint, all inside one transaction.
* Atomicity: advance balances and the payroll record commit together or
  not at all.
* ``net_salary`` is never clamped; a negative net is refused unless the
  caller passes ``allow_negative_net=True``.

Failure modes
-------------
* Lock timeout or unique-key race  -> ``ConcurrencyConflictError``.
* Period already recorded  -> ``PayrollAlreadyRecordedError`` (carries the
  existing record id).
* Negative net refused  -> ``NegativeNetSalaryError`` (carries the
  computed net and deduction).
* Any exception  -> session rolled back, exception re-raised.

Audit relevance
---------------
``payroll_run_started`` / ``payroll_run_committed`` log events carry the
run id, amounts and the config checksum; every advance deduction logs its
balance before and after.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payroll_config.schema import PayrollEngineConfig
from payroll_engines.tax_calculator import TaxCalculator
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.values import Employee, EmployeeKind, PayPeriod
from payroll_kernel.exceptions import (
    ConcurrencyConflictError,
    NegativeNetSalaryError,
    PayrollAlreadyRecordedError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.utils.idempotency import generate_payroll_run_key
from payroll_kernel.utils.locks import EmployeeLockRegistry, employee_locks
from payroll_modules.advances.service import AdvanceLedger
from payroll_modules.payroll.models import (
    AdvanceLineItem,
    PayrollPreview,
    PayrollRecord,
)
from payroll_modules.payroll.orm import PayrollRecordModel
from payroll_modules.payroll.selectors import PayrollHistorySelector

logger = get_logger("modules.payroll.service")

ZERO = Decimal("0")


class PayrollRunner:
    """
    Orchestrates a payroll run through the tax engine and advance ledger.

    Contract
    --------
    * ``run`` returns the persisted ``PayrollRecord`` or raises; it never
      returns a partial result.
    * ``preview`` and ``history`` never mutate.

    Guarantees
    ----------
    * Session is committed exactly once per successful ``run``; rolled back
      on every failure.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT check who may run payroll; callers perform capability
      checks before calling.
    * Does NOT correct or reverse a recorded period.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: PayrollEngineConfig | None = None,
        calculator: TaxCalculator | None = None,
        locks: EmployeeLockRegistry | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or PayrollEngineConfig.default()
        self._calculator = calculator or TaxCalculator.from_config(self._config)
        self._locks = locks or employee_locks

        # We own the transaction boundary.
        self._ledger = AdvanceLedger(
            session,
            clock=self._clock,
            policy=self._config.advances,
            auto_commit=False,
        )
        self._history = PayrollHistorySelector(session)

    # =========================================================================
    # Run
    # =========================================================================

    def run(
        self,
        employee: Employee,
        period: PayPeriod | str,
        actor_id: UUID,
        allow_negative_net: bool = False,
    ) -> PayrollRecord:
        """
        Run payroll for ``employee`` in ``period``.

        Preconditions:
            - ``employee.base_salary`` > 0 (enforced by ``Employee``).
        Postconditions:
            - On success: one new PayrollRecord, every active advance reduced
              by its installment, session committed.
            - On failure: nothing changed, session rolled back.

        A negative net is refused by default: the computed net and
        deduction travel on ``NegativeNetSalaryError`` and nothing is
        recorded.  A caller that wants the record persisted and returned
        with ``negative_net=True`` must pass ``allow_negative_net=True``.

        Raises:
            ConcurrencyConflictError: lock timeout or lost unique-key race.
            PayrollAlreadyRecordedError: the period is already recorded.
            NegativeNetSalaryError: net < 0 and not allowed.
        """
        period = PayPeriod.parse(period)
        key = generate_payroll_run_key(employee.kind, employee.id, period.code)
        run_id = uuid4()
        timeout = self._config.runs.lock_timeout_seconds

        with LogContext.bind(
            employee_id=employee.id,
            period=period.code,
            actor_id=actor_id,
            run_id=run_id,
        ):
            logger.info("payroll_run_started", extra={
                "employee_kind": employee.kind.value,
                "gross_salary": str(employee.base_salary),
                "config_id": self._config.config_id,
                "config_checksum": self._config.checksum,
                "allow_negative_net": allow_negative_net,
            })

            with self._locks.hold(str(employee.ref), timeout) as acquired:
                if not acquired:
                    raise ConcurrencyConflictError(
                        str(employee.id),
                        period.code,
                        f"employee lock not acquired within {timeout}s",
                    )
                try:
                    record = self._run_locked(
                        employee, period, key, run_id, actor_id, allow_negative_net
                    )
                    self._session.commit()
                except IntegrityError as exc:
                    self._session.rollback()
                    logger.warning("payroll_run_unique_key_conflict", extra={
                        "idempotency_key": key,
                    })
                    raise ConcurrencyConflictError(
                        str(employee.id),
                        period.code,
                        "payroll record inserted concurrently",
                    ) from exc
                except Exception:
                    self._session.rollback()
                    raise

            logger.info("payroll_run_committed", extra={
                "record_id": str(record.id),
                "tax_amount": str(record.tax_amount),
                "advance_deduction": str(record.advance_deduction),
                "net_salary": str(record.net_salary),
                "negative_net": record.negative_net,
            })
            return record

    def _run_locked(
        self,
        employee: Employee,
        period: PayPeriod,
        key: str,
        run_id: UUID,
        actor_id: UUID,
        allow_negative_net: bool,
    ) -> PayrollRecord:
        existing = self._history.find_for_period(employee.id, employee.kind, period)
        if existing is not None:
            logger.warning("payroll_already_recorded", extra={
                "record_id": str(existing.id),
            })
            raise PayrollAlreadyRecordedError(
                str(employee.id), period.code, str(existing.id)
            )

        tax = self._calculator.compute(employee.base_salary)
        deductions = self._ledger.active_deductions(
            employee.id, employee.kind, for_update=True
        )
        total_deduction = sum((d.monthly_deduction for d in deductions), ZERO)
        net_salary = tax.net - total_deduction

        if net_salary < ZERO:
            if not allow_negative_net:
                logger.warning("payroll_negative_net_refused", extra={
                    "net_salary": str(net_salary),
                    "advance_deduction": str(total_deduction),
                })
                raise NegativeNetSalaryError(
                    str(employee.id), period.code, str(net_salary), str(total_deduction)
                )
            logger.warning("payroll_negative_net_recorded", extra={
                "net_salary": str(net_salary),
                "advance_deduction": str(total_deduction),
            })

        for deduction in deductions:
            self._ledger.apply_deduction(
                deduction.advance_id, deduction.monthly_deduction, actor_id
            )

        record = PayrollRecord(
            id=run_id,
            employee_id=employee.id,
            employee_kind=employee.kind,
            period=period.code,
            gross_salary=tax.gross,
            ostie_amount=tax.ostie,
            cnaps_amount=tax.cnaps,
            taxable_income=tax.taxable_income,
            tax_amount=tax.total_tax,
            minimum_tax_applied=tax.minimum_tax_applied,
            advance_deduction=total_deduction,
            net_salary=net_salary,
            negative_net=net_salary < ZERO,
            run_timestamp=self._clock.now(),
            idempotency_key=key,
            created_by_id=actor_id,
        )
        self._session.add(PayrollRecordModel.from_dto(record, created_by_id=actor_id))
        self._session.flush()
        return record

    # =========================================================================
    # Read side
    # =========================================================================

    def preview(self, employee: Employee, period: PayPeriod | str) -> PayrollPreview:
        """The breakdown a run would record, without writing anything."""
        period = PayPeriod.parse(period)
        existing = self._history.find_for_period(employee.id, employee.kind, period)
        tax = self._calculator.compute(employee.base_salary)
        lines = tuple(
            AdvanceLineItem(
                advance_id=d.advance_id,
                remaining_before=d.remaining_balance,
                deduction=d.monthly_deduction,
                settles_advance=d.settles_advance,
            )
            for d in self._ledger.active_deductions(employee.id, employee.kind)
        )
        return PayrollPreview(
            employee_id=employee.id,
            employee_kind=employee.kind,
            period=period.code,
            tax=tax,
            advance_lines=lines,
            already_recorded=existing is not None,
            existing_record_id=existing.id if existing is not None else None,
        )

    def history(
        self,
        employee_id: UUID,
        employee_kind: EmployeeKind | str,
        limit: int | None = None,
    ) -> list[PayrollRecord]:
        """Past runs of one employee, most recent first."""
        return self._history.records_for_employee(employee_id, employee_kind, limit)
